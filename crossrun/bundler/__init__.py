"""Bundler module - preprocessors for served files."""

from .esbuild import (
    EsbuildPreprocessor,
    SaveAdapterPreprocessor,
    bundle_factory,
    save_adapter_factory,
)

__all__ = [
    "EsbuildPreprocessor",
    "SaveAdapterPreprocessor",
    "bundle_factory",
    "save_adapter_factory",
]
