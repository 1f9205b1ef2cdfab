import pytest

from swidtag import AttributeConflictError, Role, SwidTag, VersionScheme
from swidtag.vocabulary import Elements
from swidtag.xml_codec import parse_tree


def test_empty_document():
    tag = SwidTag()
    assert tag.element_name == Elements.SoftwareIdentity
    assert SwidTag.is_swidtag(tag)
    assert tag.attributes == {}
    assert tag.meta == [] and tag.links == [] and tag.entities == []
    assert tag.payload is None and tag.evidence is None


def test_is_swidtag():
    assert SwidTag.is_swidtag(Elements.SoftwareIdentity)
    assert not SwidTag.is_swidtag(Elements.Link)
    assert not SwidTag.is_swidtag(None)


def test_identity_accessors():
    tag = SwidTag()
    tag.name = 'Sample'
    tag.version = '1.2.3'
    tag.version_scheme = VersionScheme.MultipartNumeric
    tag.tag_id = 'sample-1.2.3'
    tag.tag_version = 2
    tag.media = '(OS:windows)'
    assert (tag.name, tag.version, tag.version_scheme) == ('Sample', '1.2.3', 'multipartnumeric')
    assert tag.tag_id == 'sample-1.2.3'
    assert tag.tag_version == '2'
    assert tag.media == '(OS:windows)'


def test_flags_are_tristate():
    tag = SwidTag()
    assert tag.is_corpus is None
    tag.is_corpus = True
    tag.is_patch = False
    tag.is_supplemental = None
    assert tag.is_corpus is True
    assert tag.is_patch is False
    assert tag.is_supplemental is None
    assert tag.get_attribute('corpus') == 'true'
    assert tag.get_attribute('patch') == 'false'


def test_flag_reading_is_case_sensitive():
    tag = SwidTag()
    tag.add_attribute('corpus', 'True')
    assert tag.is_corpus is False


def test_flags_are_set_once():
    tag = SwidTag()
    tag.is_patch = True
    tag.is_patch = True
    with pytest.raises(AttributeConflictError):
        tag.is_patch = False


def test_collections_are_live_views():
    tag = SwidTag()
    tag.add_meta().summary = 'x'
    assert [m.summary for m in tag.meta] == ['x']
    tag.add_meta().product = 'y'
    assert [m.product for m in tag.meta] == [None, 'y']

    tag.add_entity('Acme', 'acme.example.com', [Role.TagCreator, Role.SoftwareCreator])
    entity = tag.entities[0]
    assert entity.name == 'Acme'
    assert entity.reg_id == 'acme.example.com'
    assert entity.role == 'tagCreator softwareCreator'
    assert entity.roles == ['tagCreator', 'softwareCreator']


def test_add_link_validates_href():
    tag = SwidTag()
    with pytest.raises(ValueError):
        tag.add_link('not a uri', 'component')
    with pytest.raises(ValueError):
        tag.add_link('relative/path', 'component')
    assert tag.links == []


def test_remove_link():
    tag = SwidTag()
    tag.add_link('http://example.com/a', 'component')
    tag.add_link('http://example.com/b', 'component')
    tag.add_link('http://example.com/a', 'requires')
    assert tag.remove_link('http://example.com/a') == 2
    assert [link.href for link in tag.links] == ['http://example.com/b']
    assert tag.remove_link('http://example.com/missing') == 0
    assert 'http://example.com/a' not in tag.to_xml()


def test_payload_and_evidence_are_created_once():
    tag = SwidTag()
    payload = tag.add_payload()
    assert tag.add_payload() == payload
    assert len(tag.child_ids(Elements.Payload)) == 1

    evidence = tag.add_evidence()
    evidence.date = '2024-01-31T12:00:00Z'
    evidence.device_id = 'host-01'
    assert tag.add_evidence() == evidence
    assert len(tag.child_ids(Elements.Evidence)) == 1
    assert tag.evidence.device_id == 'host-01'


def test_payload_resources():
    tag = SwidTag()
    payload = tag.add_payload()
    bin_dir = payload.add_directory('bin', root='%ProgramFiles%')
    bin_dir.add_file('tool.exe').size = 1024
    bin_dir.add_directory('plugins')
    payload.add_process('tool.exe', pid=42)
    payload.add_resource('registry')

    payload = tag.payload
    assert payload.directories[0].root == '%ProgramFiles%'
    assert payload.directories[0].files[0].size == '1024'
    assert [d.name for d in payload.directories[0].directories] == ['plugins']
    assert payload.processes[0].pid == '42'
    assert payload.resources[0].type == 'registry'
    assert payload.files == []


def test_is_applicable_uses_media():
    tag = SwidTag()
    assert tag.is_applicable({'OS': 'linux'})
    tag.media = '(OS:windows)'
    assert tag.is_applicable({'os': 'Windows'})
    assert not tag.is_applicable({'OS': 'linux'})
    assert not tag.is_applicable()


def test_wraps_existing_tree(feed_xml):
    tag = SwidTag(parse_tree(feed_xml))
    assert tag.name == 'SampleFeed'
    assert len(tag.links) == 2
    tag.add_link('http://example.com/more', 'feed').keyword = 'extra'
    # discovery was already declared on the root by the source document
    assert list(tag.node.declarations()) == ['discovery']
