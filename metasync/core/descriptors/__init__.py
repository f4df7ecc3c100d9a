from .models import MetadataKind, MetadataRecordDescriptor, ValidationRule
from .loader import DescriptorFileError, load_descriptor_file, parse_descriptors

__all__ = [
    "MetadataKind",
    "MetadataRecordDescriptor",
    "ValidationRule",
    "DescriptorFileError",
    "load_descriptor_file",
    "parse_descriptors",
]
