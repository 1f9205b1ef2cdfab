# -*- coding: utf-8 -*-
"""Typed views over SWID tag child elements."""

from __future__ import annotations

from typing import Iterable, List, Optional, Union
from urllib.parse import urlparse

from .element import Element, attribute_property, flag_property
from .vocabulary import Attributes, Discovery, Elements


def parse_uri(value: Optional[str]) -> str:
    """Return `value` if it is an absolute URI, else raise ValueError."""
    text = (value or "").strip()
    parsed = urlparse(text)
    if not parsed.scheme or not (parsed.netloc or parsed.path) or any(c.isspace() for c in text):
        raise ValueError(f"Not an absolute URI: {value!r}")
    return text


class Meta(Element):
    """SoftwareMetadata: free-form descriptive attributes."""

    ELEMENT_NAME = Elements.Meta

    activation_status = attribute_property(Attributes.ActivationStatus)
    channel_type = attribute_property(Attributes.ChannelType)
    colloquial_version = attribute_property(Attributes.ColloquialVersion)
    description = attribute_property(Attributes.Description)
    edition = attribute_property(Attributes.Edition)
    entitlement_data_required = flag_property(Attributes.EntitlementDataRequired)
    entitlement_key = attribute_property(Attributes.EntitlementKey)
    generator = attribute_property(Attributes.Generator)
    persistent_id = attribute_property(Attributes.PersistentId)
    product = attribute_property(Attributes.Product)
    product_family = attribute_property(Attributes.ProductFamily)
    revision = attribute_property(Attributes.Revision)
    summary = attribute_property(Attributes.Summary)
    unspsc_code = attribute_property(Attributes.UnspscCode)
    unspsc_version = attribute_property(Attributes.UnspscVersion)


class Link(Element):
    ELEMENT_NAME = Elements.Link

    def __init__(self, href: Optional[str] = None, relationship: Optional[str] = None) -> None:
        super().__init__()
        if href is not None:
            self.add_attribute(Attributes.HRef, parse_uri(href))
        self.add_attribute(Attributes.Relationship, relationship)

    href = attribute_property(Attributes.HRef)
    relationship = attribute_property(Attributes.Relationship)
    media_type = attribute_property(Attributes.MediaType)
    ownership = attribute_property(Attributes.Ownership)
    use = attribute_property(Attributes.Use)
    artifact = attribute_property(Attributes.Artifact)
    media = attribute_property(Attributes.Media)

    # package discovery extensions
    discovery_name = attribute_property(Discovery.Name)
    minimum_name = attribute_property(Discovery.MinimumName)
    maximum_name = attribute_property(Discovery.MaximumName)
    minimum_version = attribute_property(Discovery.MinimumVersion)
    maximum_version = attribute_property(Discovery.MaximumVersion)
    keyword = attribute_property(Discovery.Keyword)
    discovery_version = attribute_property(Discovery.Version)
    latest = flag_property(Discovery.Latest)
    target_filename = attribute_property(Discovery.TargetFilename)
    discovery_type = attribute_property(Discovery.Type)


class Entity(Element):
    ELEMENT_NAME = Elements.Entity

    def __init__(self, name: Optional[str] = None, reg_id: Optional[str] = None,
                 role: Union[str, Iterable[str], None] = None) -> None:
        super().__init__()
        self.add_attribute(Attributes.Name, name)
        self.add_attribute(Attributes.RegId, reg_id)
        if role is not None and not isinstance(role, str):
            role = " ".join(r for r in role if r)
        self.add_attribute(Attributes.Role, role)

    name = attribute_property(Attributes.Name)
    reg_id = attribute_property(Attributes.RegId)
    role = attribute_property(Attributes.Role)
    thumbprint = attribute_property(Attributes.Thumbprint)

    @property
    def roles(self) -> List[str]:
        return (self.role or "").split()


# ------------------ Resources ------------------
class File(Element):
    ELEMENT_NAME = Elements.File

    def __init__(self, name: Optional[str] = None, location: Optional[str] = None,
                 root: Optional[str] = None) -> None:
        super().__init__()
        self.add_attribute(Attributes.Name, name)
        self.add_attribute(Attributes.Location, location)
        self.add_attribute(Attributes.Root, root)

    name = attribute_property(Attributes.Name)
    location = attribute_property(Attributes.Location)
    root = attribute_property(Attributes.Root)
    key = attribute_property(Attributes.Key)
    size = attribute_property(Attributes.Size)
    version = attribute_property(Attributes.Version)


class Directory(Element):
    ELEMENT_NAME = Elements.Directory

    def __init__(self, name: Optional[str] = None, location: Optional[str] = None,
                 root: Optional[str] = None) -> None:
        super().__init__()
        self.add_attribute(Attributes.Name, name)
        self.add_attribute(Attributes.Location, location)
        self.add_attribute(Attributes.Root, root)

    name = attribute_property(Attributes.Name)
    location = attribute_property(Attributes.Location)
    root = attribute_property(Attributes.Root)
    key = attribute_property(Attributes.Key)

    @property
    def directories(self) -> List["Directory"]:
        return self.children_of(Directory)

    @property
    def files(self) -> List[File]:
        return self.children_of(File)

    def add_directory(self, name: str, location: Optional[str] = None,
                      root: Optional[str] = None) -> "Directory":
        return self.add_element(Directory(name, location, root))

    def add_file(self, name: str, location: Optional[str] = None,
                 root: Optional[str] = None) -> File:
        return self.add_element(File(name, location, root))


class Process(Element):
    ELEMENT_NAME = Elements.Process

    def __init__(self, name: Optional[str] = None, pid: Optional[int] = None) -> None:
        super().__init__()
        self.add_attribute(Attributes.Name, name)
        self.add_attribute(Attributes.Pid, pid)

    name = attribute_property(Attributes.Name)
    pid = attribute_property(Attributes.Pid)


class Resource(Element):
    ELEMENT_NAME = Elements.Resource

    def __init__(self, type: Optional[str] = None) -> None:
        super().__init__()
        self.add_attribute(Attributes.Type, type)

    type = attribute_property(Attributes.Type)


class ResourceCollection(Element):
    """Shared body of Payload and Evidence."""

    @property
    def directories(self) -> List[Directory]:
        return self.children_of(Directory)

    @property
    def files(self) -> List[File]:
        return self.children_of(File)

    @property
    def processes(self) -> List[Process]:
        return self.children_of(Process)

    @property
    def resources(self) -> List[Resource]:
        return self.children_of(Resource)

    def add_directory(self, name: str, location: Optional[str] = None,
                      root: Optional[str] = None) -> Directory:
        return self.add_element(Directory(name, location, root))

    def add_file(self, name: str, location: Optional[str] = None,
                 root: Optional[str] = None) -> File:
        return self.add_element(File(name, location, root))

    def add_process(self, name: str, pid: Optional[int] = None) -> Process:
        return self.add_element(Process(name, pid))

    def add_resource(self, type: str) -> Resource:
        return self.add_element(Resource(type))


class Payload(ResourceCollection):
    """Items that may be installed on a device when the software is installed."""

    ELEMENT_NAME = Elements.Payload


class Evidence(ResourceCollection):
    """Results of a scan that discovered software without a SWID tag."""

    ELEMENT_NAME = Elements.Evidence

    date = attribute_property(Attributes.Date)
    device_id = attribute_property(Attributes.DeviceId)
