"""Environments that individuals act in."""

from .foraging_field import FieldConfig, ForagingField

__all__ = ["FieldConfig", "ForagingField"]
