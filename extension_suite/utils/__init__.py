from . import enums, functional, mappings, sequences, strings

__all__ = ["enums", "functional", "mappings", "sequences", "strings"]
