"""
Centralized Textual CSS for the terminal UI.

Colors come from the registered PagePix theme ($primary is the accent).
"""


APP_CSS = """
Screen {
    background: $background;
    color: $foreground;
}
#views {
    height: 1fr;
    margin: 1 2;
}
.view {
    height: 1fr;
    layout: vertical;
    padding: 1 2;
    border: round $primary;
    background: $surface;
}
.title {
    color: $primary;
    text-style: bold;
    margin-bottom: 1;
}
.label {
    color: $primary;
    text-style: bold;
    margin-top: 1;
}
.muted {
    color: $text-muted;
}
.error {
    color: $error;
}
.row {
    height: auto;
    margin-top: 1;
}
Button {
    margin-right: 1;
}
Button.-primary {
    background: $primary;
    color: $background;
}
Button.-primary:hover {
    background: $secondary;
}
Button#cancel-conversion {
    border: tall $error;
}
#drop-input, #page-range-input, #output-dir-input, #accent-input {
    width: 1fr;
}
#recent-list {
    height: auto;
    max-height: 9;
    margin-top: 1;
}
#progress-bar {
    margin-top: 1;
}
#page-log {
    height: 5;
    margin-top: 1;
    border: solid $panel;
}
.thumbnail-grid {
    height: 1fr;
    margin-top: 1;
}
.thumbnail-cells {
    grid-size: 6;
    grid-columns: 14;
    grid-rows: 10;
    grid-gutter: 1 1;
    height: auto;
}
.thumbnail-tile {
    width: 14;
    height: 10;
    padding: 0 1;
    content-align: center middle;
    background: $panel;
}
.thumbnail-tile.-filled {
    background: $surface;
}
.thumbnail-tile:focus {
    background: $primary 30%;
}
#complete-summary {
    margin-top: 1;
}
#settings-form {
    height: 1fr;
}
#settings-form Select, #settings-form Input {
    margin-bottom: 1;
}
"""


FILE_PICKER_CSS = """
FilePickerScreen {
    align: center middle;
}
#picker-root {
    width: 90;
    height: 85%;
    border: heavy $primary;
    background: $surface;
    padding: 1 2;
    layout: vertical;
}
#picker-title {
    color: $primary;
    text-style: bold;
    margin-bottom: 1;
}
#picker-tree {
    height: 1fr;
    margin: 1 0;
}
#picker-error {
    color: $error;
    height: auto;
}
#picker-actions {
    height: auto;
    margin-top: 1;
}
"""


CONFIRM_CSS = """
ConfirmScreen {
    align: center middle;
}
#confirm-root {
    width: 60;
    height: auto;
    border: heavy $primary;
    background: $surface;
    padding: 1 2;
}
#confirm-title {
    color: $primary;
    text-style: bold;
    margin-bottom: 1;
}
#confirm-actions {
    height: auto;
    margin-top: 1;
}
Button#confirm-ok {
    background: $error;
}
"""


PREVIEW_CSS = """
PreviewScreen {
    align: center middle;
}
#preview-root {
    width: auto;
    height: auto;
    max-width: 100%;
    max-height: 100%;
    border: heavy $primary;
    background: $surface;
    padding: 1 2;
}
#preview-title {
    color: $primary;
    text-style: bold;
    margin-bottom: 1;
}
#preview-image {
    width: auto;
    height: auto;
}
#preview-actions {
    height: auto;
    width: auto;
    margin-top: 1;
}
"""
