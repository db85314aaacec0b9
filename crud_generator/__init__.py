"""crud-generator: scaffold a complete CRUD resource into a Laravel project."""

__version__ = "0.1.0"
