"""Search input widget for filtering lists and querying panels."""

from textual.widgets import Input
from textual.message import Message


class SearchInput(Input):
    """Input widget specialized for search/filtering."""

    class FilterChanged(Message):
        """Message sent when filter text changes."""

        def __init__(self, filter_text: str) -> None:
            super().__init__()
            self.filter_text = filter_text

    class QuerySubmitted(Message):
        """Message sent when the user presses Enter in the input."""

        def __init__(self, query: str) -> None:
            super().__init__()
            self.query = query

    def __init__(self, placeholder: str = "Type to filter...", **kwargs):
        super().__init__(placeholder=placeholder, **kwargs)

    def on_input_changed(self, event: Input.Changed) -> None:
        """Handle input changes and emit filter message."""
        event.stop()
        self.post_message(self.FilterChanged(event.value))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.post_message(self.QuerySubmitted(event.value))
