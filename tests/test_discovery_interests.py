import pytest

from hfn.fabric.errors import InvalidArgument
from hfn.fabric.network.discovery_interests import DiscoveryInterestSet, toDiscoveryInterest


def test_set_is_empty_until_used():
    interests = DiscoveryInterestSet('mycc', ['col1'])
    assert not interests.initialized
    assert len(interests) == 0
    assert list(interests) == []


def test_get_seeds_default_once():
    interests = DiscoveryInterestSet('mycc', ['col1'])
    assert interests.getInterests() == [{'name': 'mycc', 'collectionNames': ['col1']}]
    assert interests.getInterests() == [{'name': 'mycc', 'collectionNames': ['col1']}]
    assert interests.initialized
    assert len(interests) == 1


def test_replacing_default_keeps_it_first():
    interests = DiscoveryInterestSet('mycc')
    interests.add({'name': 'other'})
    interests.add({'name': 'mycc', 'collectionNames': ['private']})
    assert [interest['name'] for interest in interests] == ['mycc', 'other']
    assert interests.getInterests()[0] == {'name': 'mycc', 'collectionNames': ['private']}


def test_replace_is_last_write_wins():
    interests = DiscoveryInterestSet('mycc')
    interests.add({'name': 'other', 'collectionNames': ['a', 'b']})
    interests.add({'name': 'other', 'collectionNames': ['c']})
    assert interests.getInterests()[1] == {'name': 'other', 'collectionNames': ['c']}


def test_added_interest_is_copied():
    interest = {'name': 'other', 'collectionNames': ['a']}
    interests = DiscoveryInterestSet('mycc')
    interests.add(interest)
    interest['collectionNames'].append('b')
    assert interests.getInterests()[1] == {'name': 'other', 'collectionNames': ['a']}


@pytest.mark.parametrize('interest', [None, 'name', b'name', 12, {}, {'name': ''}, {'name': 3}])
def test_rejects_invalid_interest(interest):
    with pytest.raises(InvalidArgument, match='"interest" parameter'):
        toDiscoveryInterest(interest)


def test_keeps_no_private_reads_flag():
    assert toDiscoveryInterest({'name': 'cc', 'noPrivateReads': 1}) == {'name': 'cc', 'noPrivateReads': True}


def test_drops_unknown_fields():
    assert toDiscoveryInterest({'name': 'cc', 'extra': 'x'}) == {'name': 'cc'}
