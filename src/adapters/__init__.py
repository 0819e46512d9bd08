"""Adaptadores concretos del store y de exportación."""
