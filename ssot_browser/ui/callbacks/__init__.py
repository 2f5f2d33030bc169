from .callbacks_edit import register_edit_callbacks
from .callbacks_export import register_export_callbacks
from .callbacks_filters import register_filter_callbacks
from .callbacks_load import register_load_callbacks

__all__ = [
    "register_edit_callbacks",
    "register_export_callbacks",
    "register_filter_callbacks",
    "register_load_callbacks",
]
