"""SQLModel table models, registered through `loader.get_metadata()`."""
