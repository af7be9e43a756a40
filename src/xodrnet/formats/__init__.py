"""Support for map file formats."""
