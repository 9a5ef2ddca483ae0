"""HH Tracker: turn hh.ru response pastes into tracked applications."""

__version__ = "0.1.0"
