from .formatting import english_enumerate, split_csv  # noqa
