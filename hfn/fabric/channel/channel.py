# Copyright 281165273@qq.com. All Rights Reserved.
#
# SPDX-License-Identifier: Apache-2.0
import logging
import re

from hfn.fabric.channel.discovery_service import DiscoveryService
from hfn.fabric.channel.endorsement import Endorsement
from hfn.fabric.errors import DuplicatePeer, InvalidArgument

_logger = logging.getLogger(__name__)

ENDORSER = 'endorser'
COMMITTER = 'committer'
DISCOVERER = 'discoverer'


class Channel(object):
    """The class represents a channel as seen by the client.

    It only keeps track of the peers it may talk to, grouped by role, and
    builds the discovery services and endorsements that talk to them.
    Connections are owned by the peer objects handed to it.
    """

    def __init__(self, name, client=None):
        """Construct channel instance

        Args:
            name (str): a unique name serves as the identifier of the channel
            client (object): optional operational context, e.g. the gateway
        """
        pat = "^[a-z][a-z0-9.-]*$"  # matching patter for regex checker
        if not isinstance(name, str) or not re.match(pat, name):
            raise InvalidArgument(f'Failed to create Channel. channel name should'
                                  f' match Regex {pat}, but got {name}')

        self._name = name
        self._client = client
        self._peers = {
            ENDORSER: {},
            COMMITTER: {},
            DISCOVERER: {},
        }

        _logger.debug(f'Constructed Channel instance name - {self._name}')

    @property
    def name(self):
        return self._name

    @property
    def client(self):
        return self._client

    def _addPeer(self, role, peer, replace):
        if not peer or not getattr(peer, 'name', None):
            raise InvalidArgument(f'Missing {role} parameter or {role} has no name')

        name = peer.name
        peers = self._peers[role]

        if name in peers:
            if replace:
                _logger.debug(f'removing old {role} --name: {name}')
            else:
                msg = f'{role.capitalize()} {name} already exists'
                _logger.error(msg)
                raise DuplicatePeer(msg)

        _logger.debug(f'adding a new {role} --name: {name}')
        peers[name] = peer

    def addEndorser(self, endorser, replace=False):
        self._addPeer(ENDORSER, endorser, replace)

    def addCommitter(self, committer, replace=False):
        self._addPeer(COMMITTER, committer, replace)

    def addDiscoverer(self, discoverer, replace=False):
        self._addPeer(DISCOVERER, discoverer, replace)

    def removeEndorser(self, endorser):
        self._peers[ENDORSER].pop(endorser.name, None)

    def getEndorser(self, name):
        endorser = self._peers[ENDORSER].get(name)

        if not endorser:
            raise InvalidArgument(f'Endorser with name "{name}" not assigned to this channel')

        return endorser

    def getEndorsers(self, mspid=None):
        endorsers = list(self._peers[ENDORSER].values())
        if mspid:
            endorsers = [endorser for endorser in endorsers if getattr(endorser, 'mspid', None) == mspid]

        _logger.debug(f'getEndorsers - list size: {len(endorsers)}')
        return endorsers

    def getCommitters(self):
        _logger.debug(f'getCommitters - list size: {len(self._peers[COMMITTER])}')
        return list(self._peers[COMMITTER].values())

    def getDiscoverers(self):
        return list(self._peers[DISCOVERER].values())

    def newDiscoveryService(self, name):
        _logger.debug(f'newDiscoveryService - name: {name}')
        return DiscoveryService(name, self)

    def newEndorsement(self, chaincodeId):
        _logger.debug(f'newEndorsement - chaincodeId: {chaincodeId}')
        return Endorsement(chaincodeId, self)

    def __str__(self):
        endorsers = ', '.join(self._peers[ENDORSER].keys())
        committers = ', '.join(self._peers[COMMITTER].keys())

        return f'Channel {self._name}, endorsers: {endorsers or "N/A"}, committers: {committers or "N/A"}'
