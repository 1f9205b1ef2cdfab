import pytest

from swidtag import AttributeConflictError, Link, SwidTag
from swidtag.vocabulary import DISCOVERY_NS, SWID_NS, Discovery, QName

EXT_NS = 'http://example.com/ext'
OTHER_NS = 'http://example.com/other'


def test_same_value_twice_is_a_noop():
    tag = SwidTag()
    tag.add_attribute('name', 'Sample')
    before = dict(tag.attributes)
    tag.add_attribute('name', 'Sample')
    assert tag.attributes == before
    assert tag.name == 'Sample'


def test_different_value_raises_and_keeps_first():
    tag = SwidTag()
    tag.name = 'Sample'
    with pytest.raises(AttributeConflictError) as exc:
        tag.name = 'Other'
    assert tag.name == 'Sample'
    assert exc.value.attribute == 'name'
    assert exc.value.element == 'SoftwareIdentity'
    assert exc.value.current == 'Sample'
    assert exc.value.value == 'Other'


def test_empty_values_and_names_are_ignored():
    tag = SwidTag()
    tag.add_attribute('name', '')
    tag.add_attribute('name', '   ')
    tag.add_attribute('name', None)
    tag.add_attribute('', 'x')
    tag.add_attribute(None, 'x')
    assert tag.attributes == {}
    tag.name = 'after'
    assert tag.name == 'after'


def test_get_attribute_missing_or_empty_name():
    tag = SwidTag()
    assert tag.get_attribute('name') is None
    assert tag.get_attribute('') is None
    assert tag.get_attribute(None) is None


def test_core_namespace_attribute_is_stored_unqualified():
    tag = SwidTag()
    tag.add_attribute('{%s}name' % SWID_NS, 'Sample')
    assert tag.get_attribute('name') == 'Sample'
    assert tag.get_attribute(QName(SWID_NS, 'name')) == 'Sample'
    assert list(tag.attributes) == [QName('', 'name')]
    assert tag.node.declarations() == {}


def test_add_attribute_chains():
    tag = SwidTag()
    assert tag.add_attribute('name', 'a').add_attribute('version', '1') is tag
    assert tag.version == '1'


def test_malformed_clark_name_raises():
    with pytest.raises(ValueError):
        SwidTag().add_attribute('{http://example.com/ext', 'x')


def test_foreign_attribute_on_link_is_declared_on_root_only():
    tag = SwidTag()
    link = tag.add_link('http://example.com/feed', 'feed')
    link.minimum_version = '1.0'
    link.keyword = 'tools'
    assert tag.node.declarations() == {'discovery': DISCOVERY_NS}
    assert link.node.declarations() == {}
    assert link.get_attribute(Discovery.MinimumVersion) == '1.0'


def test_detached_link_is_rehoisted_when_added():
    link = Link('http://example.com/pkg', 'package')
    link.latest = True
    assert link.node.declarations() == {'discovery': DISCOVERY_NS}

    tag = SwidTag()
    added = tag.add_element(link)
    assert added is link
    assert link.arena is tag.arena
    assert link.parent == tag
    assert tag.node.declarations() == {'discovery': DISCOVERY_NS}
    assert link.node.declarations() == {}
    assert link.latest is True


def test_prefix_counter_is_per_document():
    first, second = SwidTag(), SwidTag()
    first.add_attribute(QName(EXT_NS, 'color'), 'red')
    second.add_attribute(QName(EXT_NS, 'color'), 'blue')
    assert first.node.declarations() == {'pp1': EXT_NS}
    assert second.node.declarations() == {'pp1': EXT_NS}


def test_each_foreign_namespace_is_declared_once():
    tag = SwidTag()
    tag.add_attribute(QName(EXT_NS, 'a'), '1')
    tag.add_attribute(QName(OTHER_NS, 'b'), '2')
    tag.add_attribute(QName(EXT_NS, 'c'), '3')
    assert tag.node.declarations() == {'pp1': EXT_NS, 'pp2': OTHER_NS}
    assert tag.get_attribute('{%s}c' % EXT_NS) == '3'


def test_declarations_are_not_reported_as_attributes():
    tag = SwidTag()
    tag.add_attribute(QName(EXT_NS, 'a'), '1')
    assert tag.attributes == {QName(EXT_NS, 'a'): '1'}


def test_add_element_rejects_element_already_in_document():
    tag = SwidTag()
    link = tag.add_link('http://example.com/a', 'component')
    with pytest.raises(ValueError):
        tag.add_element(link)
    assert len(tag.links) == 1


def test_views_compare_by_node():
    tag = SwidTag()
    link = tag.add_link('http://example.com/a', 'component')
    assert tag.links[0] == link
    assert hash(tag.links[0]) == hash(link)
    assert tag.links[0] != SwidTag().add_link('http://example.com/a', 'component')


def test_removed_element_can_be_added_back():
    tag = SwidTag()
    link = tag.add_link('http://example.com/a', 'component')
    link.remove()
    assert tag.links == []
    assert link.parent is None

    link.keyword = 'tools'
    assert tag.add_element(link) is link
    assert tag.links == [link]
    assert tag.node.declarations() == {'discovery': DISCOVERY_NS}
    assert link.node.declarations() == {}
    assert link.keyword == 'tools'
    assert len(tag.arena.nodes) == 2


def test_add_element_rejects_the_root_and_ancestors():
    tag = SwidTag()
    payload = tag.add_payload()
    directory = payload.add_directory('bin')
    with pytest.raises(ValueError):
        directory.add_element(tag)
    payload.remove()
    with pytest.raises(ValueError):
        directory.add_element(payload)
