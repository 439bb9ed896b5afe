"""Tests for the bridge namespace and the read-only view handed to blocks."""

from collections import OrderedDict

import pandas as pd
import pytest

from duet.bridge import BridgeNamespace, BridgeView
from duet.exceptions import NameNotFoundError
from duet.values import ConversionRegistry, ValueKind, wrap_python


@pytest.fixture
def bridge():
    return BridgeNamespace('r', 'python', ConversionRegistry())


@pytest.fixture
def view(bridge):
    return bridge.view()


class TestPublish:

    def test_added(self, bridge):
        report = bridge.publish(OrderedDict([('a', 1), ('b', 'x')]), wrap_python)
        assert report.added == ('a', 'b')
        assert report.updated == ()
        assert report.removed == ()
        assert bridge.names() == ['a', 'b']

    def test_republish_is_idempotent(self, bridge):
        bindings = {'data': pd.DataFrame({'a': [1, 2]}), 'n': 5}
        bridge.publish(bindings, wrap_python)
        before = {name: bridge.raw(name) for name in bridge}

        report = bridge.publish(bindings, wrap_python)

        assert not report.changed
        assert {name: bridge.raw(name) for name in bridge} == before
        assert all(bridge.raw(name) is before[name] for name in before)

    def test_updated_and_removed(self, bridge):
        bridge.publish({'a': [1], 'b': [2]}, wrap_python)
        report = bridge.publish({'a': [10]}, wrap_python)
        assert report.updated == ('a',)
        assert report.removed == ('b',)
        assert 'b' not in bridge
        assert bridge['a'] == [10]

    def test_custom_sameness(self, bridge):
        bridge.publish({'a': [1]}, wrap_python)
        report = bridge.publish({'a': [1]}, wrap_python, same=lambda old, new: old == new)
        assert not report.changed

    def test_entries_are_references(self, bridge, view):
        data = pd.DataFrame({'a': [1, 2, 3]})
        bridge.publish({'data': data}, wrap_python)
        assert view.data is data
        assert bridge.kind_of('data') == ValueKind.TABULAR

    def test_view_follows_later_publishes(self, bridge, view):
        bridge.publish({'a': 1}, wrap_python)
        bridge.publish({'a': 2}, wrap_python)
        assert view.a == 2
        assert bridge.view() is view


class TestLookup:

    def test_attribute_and_item_access(self, bridge, view):
        bridge.publish({'result': 42}, wrap_python)
        assert view.result == 42
        assert view['result'] == 42
        assert bridge.lookup('result') == 42

    def test_missing_name(self, view):
        with pytest.raises(NameNotFoundError) as excinfo:
            view.missing
        assert excinfo.value.name == 'missing'
        assert excinfo.value.language == 'r'
        assert 'missing' in str(excinfo.value)

    def test_missing_name_behaves_like_key_and_attribute_error(self, bridge, view):
        with pytest.raises(KeyError):
            bridge['missing']
        with pytest.raises(KeyError):
            view['missing']
        assert getattr(view, 'missing', None) is None
        assert not hasattr(view, 'missing')

    def test_private_names_are_attribute_errors(self, view):
        with pytest.raises(AttributeError):
            view._hidden
        with pytest.raises(AttributeError):
            view._namespace

    def test_iteration_len_and_dir(self, bridge, view):
        bridge.publish(OrderedDict([('a', 1), ('b', 2)]), wrap_python)
        assert len(view) == 2
        assert list(view) == ['a', 'b']
        assert [(name, view[name]) for name in view] == [('a', 1), ('b', 2)]
        assert dir(view) == ['a', 'b']


class TestBindingNames:
    """Bindings may use any identifier, including names of store methods."""

    @pytest.mark.parametrize('name', ['names', 'items', 'publish', 'lookup', 'raw', 'view', 'keys'])
    def test_binding_shadows_nothing(self, bridge, view, name):
        bridge.publish({name: ['alpha', 'beta']}, wrap_python)
        assert getattr(view, name) == ['alpha', 'beta']
        assert view[name] == ['alpha', 'beta']

    def test_store_methods_are_not_reachable(self, bridge, view):
        bridge.publish({'x': 1}, wrap_python)
        assert not hasattr(view, 'publish')
        assert not hasattr(view, 'names')
        with pytest.raises(NameNotFoundError):
            view.publish
        assert isinstance(view, BridgeView)
        assert bridge.names() == ['x']


class TestReadOnly:

    def test_setattr(self, view):
        with pytest.raises(TypeError, match="read-only"):
            view.x = 1

    def test_setitem(self, view):
        with pytest.raises(TypeError, match="read-only"):
            view['x'] = 1

    def test_delete(self, bridge, view):
        bridge.publish({'x': 1}, wrap_python)
        with pytest.raises(TypeError):
            del view.x
        with pytest.raises(TypeError):
            del view['x']
        assert view.x == 1

    def test_internal_slot_cannot_be_replaced(self, view):
        with pytest.raises(TypeError, match="read-only"):
            view._namespace = None
