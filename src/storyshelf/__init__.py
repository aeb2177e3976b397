"""StoryShelf - a small story gallery built on a pre-generated file manifest."""

__version__ = "0.1.0"
