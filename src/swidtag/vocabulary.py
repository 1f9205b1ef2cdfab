# -*- coding: utf-8 -*-
"""
ISO/IEC 19770-2 (SWID tag) vocabulary: namespaces, element and attribute
names, controlled values and the qualified-name <-> JSON-LD id mapping.
"""

from __future__ import annotations

from collections import namedtuple
from typing import Dict, Optional, Union

# ------------------ Namespaces ------------------
SWID_NS = "http://standards.iso.org/iso/19770/-2/2015/schema.xsd"
DISCOVERY_NS = "http://packagemanagement.org/discovery"
ONEGET_NS = "http://oneget.org/packagemanagement"
XML_NS = "http://www.w3.org/XML/1998/namespace"
XMLNS_NS = "http://www.w3.org/2000/xmlns/"
XMLDSIG_NS = "http://www.w3.org/2000/09/xmldsig#"

# prefixes tried first when a namespace is hoisted to the root
WELL_KNOWN_PREFIXES: Dict[str, str] = {
    SWID_NS: "swid",
    DISCOVERY_NS: "discovery",
    ONEGET_NS: "install",
    XMLDSIG_NS: "ds",
}

# namespaces written straight onto an element, never hoisted
DIRECT_NAMESPACES = {"", XML_NS, XMLNS_NS}


class QName(namedtuple("QName", ["namespace", "local"])):
    """Qualified name; renders in Clark notation ('{ns}local')."""

    __slots__ = ()

    def __new__(cls, namespace: Optional[str], local: str):
        return super().__new__(cls, namespace or "", local)

    def __str__(self) -> str:
        if self.namespace:
            return "{%s}%s" % (self.namespace, self.local)
        return self.local

    @classmethod
    def parse(cls, value: Union["QName", str, None]) -> Optional["QName"]:
        if value is None:
            return None
        if isinstance(value, QName):
            return value
        text = str(value).strip()
        if not text:
            return None
        if text.startswith("{"):
            ns, sep, local = text[1:].partition("}")
            if not sep:
                raise ValueError(f"Malformed qualified name: {value!r}")
            return cls(ns, local)
        return cls("", text)


def swid(local: str) -> QName:
    return QName(SWID_NS, local)


def discovery(local: str) -> QName:
    return QName(DISCOVERY_NS, local)


def xmlns(prefix: str) -> QName:
    return QName(XMLNS_NS, prefix)


# ------------------ Elements ------------------
class Elements:
    SoftwareIdentity = swid("SoftwareIdentity")
    Entity = swid("Entity")
    Link = swid("Link")
    Evidence = swid("Evidence")
    Payload = swid("Payload")
    Meta = swid("Meta")
    Directory = swid("Directory")
    File = swid("File")
    Process = swid("Process")
    Resource = swid("Resource")

    META_ELEMENTS = (Meta, Directory, File, Process, Resource)


# ------------------ Attributes ------------------
class Attributes:
    Name = QName("", "name")
    Patch = QName("", "patch")
    Media = QName("", "media")
    Supplemental = QName("", "supplemental")
    TagVersion = QName("", "tagVersion")
    TagId = QName("", "tagId")
    Version = QName("", "version")
    VersionScheme = QName("", "versionScheme")
    Corpus = QName("", "corpus")
    Summary = QName("", "summary")
    Description = QName("", "description")
    ActivationStatus = QName("", "activationStatus")
    ChannelType = QName("", "channelType")
    ColloquialVersion = QName("", "colloquialVersion")
    Edition = QName("", "edition")
    EntitlementDataRequired = QName("", "entitlementDataRequired")
    EntitlementKey = QName("", "entitlementKey")
    Generator = QName("", "generator")
    PersistentId = QName("", "persistentId")
    Product = QName("", "product")
    ProductFamily = QName("", "productFamily")
    Revision = QName("", "revision")
    UnspscCode = QName("", "unspscCode")
    UnspscVersion = QName("", "unspscVersion")
    RegId = QName("", "regId")
    Role = QName("", "role")
    Thumbprint = QName("", "thumbprint")
    HRef = QName("", "href")
    Relationship = QName("", "rel")
    MediaType = QName("", "type")
    Ownership = QName("", "ownership")
    Use = QName("", "use")
    Artifact = QName("", "artifact")
    Type = QName("", "type")
    Key = QName("", "key")
    Root = QName("", "root")
    Location = QName("", "location")
    Size = QName("", "size")
    Pid = QName("", "pid")
    Date = QName("", "date")
    DeviceId = QName("", "deviceId")
    XmlLang = QName(XML_NS, "lang")


class Discovery:
    """Package-discovery extension attributes carried on Link elements."""

    Name = discovery("name")
    # feed link extensions
    MinimumName = discovery("min-name")
    MaximumName = discovery("max-name")
    MinimumVersion = discovery("min-version")
    MaximumVersion = discovery("max-version")
    Keyword = discovery("keyword")
    # package link extensions
    Version = discovery("version")
    Latest = discovery("latest")
    TargetFilename = discovery("targetFilename")
    Type = discovery("type")


# ------------------ Controlled values ------------------
class MediaType:
    PackageReference = "application/vnd.packagemanagement-canonicalid"
    SwidTagXml = "application/swid-tag+xml"
    SwidTagJsonLd = "application/swid-tag+json"
    MsiPackage = "application/vnd.ms.msi-package"
    MsuPackage = "application/vnd.ms.msu-package"
    ExePackage = "application/vnd.packagemanagement.exe-package"
    NuGetPackage = "application/vnd.packagemanagement.nuget-package"
    ChocolateyPackage = "application/vnd.packagemanagement.chocolatey-package"


class Relationship:
    Requires = "requires"
    InstallationMedia = "installationmedia"
    Component = "component"
    Supplemental = "supplemental"
    Parent = "parent"
    Ancestor = "ancestor"
    # package discovery
    Feed = "feed"
    Package = "package"


class Role:
    Aggregator = "aggregator"
    Distributor = "distributor"
    Licensor = "licensor"
    SoftwareCreator = "softwareCreator"
    Author = "author"
    Contributor = "contributor"
    Publisher = "publisher"
    TagCreator = "tagCreator"


class Use:
    Required = "required"
    Recommended = "recommended"
    Optional = "optional"


class VersionScheme:
    Alphanumeric = "alphanumeric"
    Decimal = "decimal"
    MultipartNumeric = "multipartnumeric"
    MultipartNumericPlusSuffix = "multipartnumeric+suffix"
    SemVer = "semver"
    Unknown = "unknown"


class Ownership:
    Abandon = "abandon"
    Private = "private"
    Shared = "shared"


# ------------------ JSON-LD ids ------------------
SWIDTAG_CONTEXT_URL = "http://packagemanagement.org/discovery"
META_CONTEXT_URL = "http://packagemanagement.org/discovery/Meta"

# compacted-term prefixes stripped from serialized JSON-LD
COMPACT_PREFIXES = ("discovery:", "swid:", "install:")


def to_json_id(name: QName, default_namespace: str = SWID_NS) -> str:
    """Map a qualified name to its JSON-LD IRI ('<namespace>#<local>')."""
    namespace = name.namespace or default_namespace
    return f"{namespace}#{name.local}"


def from_json_id(iri: str) -> QName:
    """Inverse of to_json_id; names in the core namespace come back unqualified."""
    if "#" in iri:
        namespace, _, local = iri.rpartition("#")
    elif "/" in iri:
        namespace, _, local = iri.rpartition("/")
    else:
        return QName("", iri)
    if namespace == SWID_NS:
        return QName("", local)
    return QName(namespace, local)


def to_index_key(name: QName) -> str:
    """Key used for a Meta attribute inside the JSON-LD '@index' map."""
    if not name.namespace or name.namespace == SWID_NS:
        return name.local
    return to_json_id(name)


def from_index_key(key: str) -> QName:
    if "#" in key and "://" in key:
        return from_json_id(key)
    return QName.parse(key)


class JsonMembers:
    """Expanded (IRI) keys of the JSON-LD members the loader walks."""

    SoftwareIdentity = to_json_id(Elements.SoftwareIdentity)
    Entity = to_json_id(Elements.Entity)
    Link = to_json_id(Elements.Link)
    Evidence = to_json_id(Elements.Evidence)
    Payload = to_json_id(Elements.Payload)
    Meta = to_json_id(Elements.Meta)
    Relationship = to_json_id(Attributes.Relationship)
    HRef = to_json_id(Attributes.HRef)


# compacted terms used as member keys when writing
LINK_TERM = Elements.Link.local
META_TERM = Elements.Meta.local
