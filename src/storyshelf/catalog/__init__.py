"""Manifest store, content fetchers and the document catalog."""
