from .base import MetadataProvider, StaticMetadataProvider
from .common import CommonMetadataProvider
from .install import install_all
from .registry import DescriptorRegistry, builtin_providers

__all__ = [
    "MetadataProvider",
    "StaticMetadataProvider",
    "CommonMetadataProvider",
    "DescriptorRegistry",
    "builtin_providers",
    "install_all",
]
