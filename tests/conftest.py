import pytest

from hfn.fabric.config.config import Config


class FakeEndorser(object):

    def __init__(self, name, mspid, payload=b'result', status=200, error=None):
        self.name = name
        self.mspid = mspid
        self.payload = payload
        self.status = status
        self.error = error
        self.proposals = []

    async def sendProposal(self, proposal, timeout=None):
        self.proposals.append((proposal, timeout))
        if self.error:
            raise self.error
        return {'response': {'status': self.status, 'message': '', 'payload': self.payload}}


class FakeCommitter(object):

    def __init__(self, name, status='SUCCESS', error=None):
        self.name = name
        self.status = status
        self.error = error
        self.envelopes = []

    async def sendBroadcast(self, envelope, timeout=None):
        self.envelopes.append((envelope, timeout))
        if self.error:
            raise self.error
        return {'status': self.status, 'info': ''}


class FakeDiscoverer(object):

    def __init__(self, name, results=None, error=None):
        self.name = name
        self.results = results
        self.error = error
        self.requests = []

    async def sendDiscovery(self, request, timeout=None):
        self.requests.append((request, timeout))
        if self.error:
            raise self.error
        return self.results


def plan(groups, layouts):
    return {
        'endorsement_plans': [{
            'groups': {name: {'peers': peers} for name, peers in groups.items()},
            'layouts': layouts,
        }]
    }


def planPeer(name, mspid):
    return {'name': name, 'mspid': mspid, 'endpoint': name}


@pytest.fixture(autouse=True)
def reset_config():
    Config().reset()
    yield
    Config().reset()
