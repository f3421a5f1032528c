import json
import logging
import time

from hfn.fabric.config.config import getConfigSetting
from hfn.fabric.errors import DiscoveryError

_logger = logging.getLogger(__name__)


def isGoodResponse(response):
    if not isinstance(response, dict):
        return False
    status = (response.get('response') or {}).get('status')
    return isinstance(status, int) and status < 400


class DiscoveryService(object):
    """Asks discovery peers for endorsement plans and hands out handlers
    bound to them.

    Plans are cached per set of interests and refreshed once older than
    ``refreshAge`` seconds.
    """

    def __init__(self, name, channel):
        if not name:
            raise DiscoveryError('Missing name parameter')
        if not channel:
            raise DiscoveryError('Missing channel parameter')

        self._name = name
        self._channel = channel
        self._targets = None
        self._refresh_age = getConfigSetting('discovery-cache-life', 300)
        self._request_timeout = getConfigSetting('request-timeout', 45)
        self._plans = {}

        _logger.debug(f'DiscoveryService.const - name: {name} channel: {channel.name}')

    @property
    def name(self):
        return self._name

    @property
    def channel(self):
        return self._channel

    @property
    def targets(self):
        if self._targets is None:
            return self._channel.getDiscoverers()
        return self._targets

    @targets.setter
    def targets(self, targets):
        self._targets = list(targets) if targets is not None else None

    @property
    def refreshAge(self):
        return self._refresh_age

    @refreshAge.setter
    def refreshAge(self, seconds):
        self._refresh_age = seconds

    def close(self):
        self._plans.clear()

    async def newHandler(self, identityContext, eventHandlerOptions, asLocalhost, interests):
        method = 'newHandler'
        _logger.debug(f'{method} - start - {self._name}')

        plan = await self.getEndorsementPlan(identityContext, interests)
        return DiscoveryHandler(self, plan, eventHandlerOptions, asLocalhost)

    async def getEndorsementPlan(self, identityContext, interests):
        method = 'getEndorsementPlan'

        plan_id = json.dumps(interests, sort_keys=True)
        _logger.debug(f'{method} - looking at plan_id of {plan_id}')

        plan = self._plans.get(plan_id)
        if plan and time.monotonic() - plan['timestamp'] <= self._refresh_age:
            _logger.debug(f'{method} - found plan in known plans ::{plan_id}')
            return plan

        _logger.debug(f'{method} - need to refresh :: {plan_id}')
        results = await self._discover(identityContext, interests)

        plans = results.get('endorsement_plans')
        if not plans:
            raise DiscoveryError(f'Discovery returned no endorsement plan for {plan_id}')

        plan = dict(plans[0])
        plan['plan_id'] = plan_id
        plan['timestamp'] = time.monotonic()
        self._plans[plan_id] = plan

        return plan

    def _buildRequest(self, identityContext, interests):
        return {
            'channel': self._channel.name,
            'authentication': {
                'client_identity': identityContext.serializeIdentity(),
                'client_tls_cert_hash': identityContext.getClientCertHash(),
            },
            'interests': interests,
        }

    async def _discover(self, identityContext, interests):
        method = '_discover'
        _logger.debug(f'{method} - start')

        targets = self.targets
        if not targets:
            raise DiscoveryError(f'No discovery targets assigned to {self._name}')

        request = self._buildRequest(identityContext, interests)

        final_error = None
        for target in targets:
            try:
                _logger.debug(f'{method} - target peer {target.name} starting')
                response = await target.sendDiscovery(request, self._request_timeout)
                if not response:
                    raise DiscoveryError('Discover results are missing')
                if 'error' in response:
                    raise DiscoveryError(f'Channel {self._channel.name} Discovery error: {response["error"]}')
                return response
            except Exception as e:
                _logger.error(f'{method} - target peer {target.name} failed {e}')
                final_error = e

        raise DiscoveryError(f'Discovery has failed to return results: {final_error}')


class DiscoveryHandler(object):
    """Selects endorsing peers following one endorsement plan."""

    def __init__(self, discoveryService, plan, eventHandlerOptions=None, asLocalhost=False):
        self._discovery_service = discoveryService
        self._plan = plan
        self._event_handler_options = eventHandlerOptions or {}
        self._as_localhost = asLocalhost

    @property
    def discoveryService(self):
        return self._discovery_service

    @property
    def plan(self):
        return self._plan

    @property
    def asLocalhost(self):
        return self._as_localhost

    @property
    def eventHandlerOptions(self):
        return self._event_handler_options

    def _timeout(self, timeout):
        if timeout is not None:
            return timeout
        return self._event_handler_options.get('endorseTimeout')

    def _resolveEndorser(self, peer, endorsers):
        if peer.get('name') in endorsers:
            return endorsers[peer['name']]

        if self._as_localhost and peer.get('endpoint'):
            port = peer['endpoint'].rsplit(':', 1)[-1]
            return endorsers.get(f'localhost:{port}')

        return None

    def _groupPeers(self, group, requiredOrgs=None):
        endorsers = {endorser.name: endorser for endorser in self._discovery_service.channel.getEndorsers()}

        resolved = []
        for peer in self._plan.get('groups', {}).get(group, {}).get('peers', []):
            if requiredOrgs and peer.get('mspid') not in requiredOrgs:
                continue
            endorser = self._resolveEndorser(peer, endorsers)
            if endorser:
                resolved.append(endorser)
            else:
                _logger.debug(f'_groupPeers - peer {peer.get("name")} is not a known endorser')

        return resolved

    def getEndorsers(self, requiredOrgs=None):
        endorsers = []
        for group in self._plan.get('groups', {}):
            for endorser in self._groupPeers(group, requiredOrgs):
                if endorser not in endorsers:
                    endorsers.append(endorser)
        return endorsers

    async def _send(self, endorser, proposal, timeout, sent):
        if endorser.name not in sent:
            try:
                sent[endorser.name] = await endorser.sendProposal(proposal, timeout)
            except Exception as e:
                _logger.error(f'_send - endorser {endorser.name} failed {e}')
                sent[endorser.name] = e
        return sent[endorser.name]

    async def endorse(self, proposal, timeout=None, requiredOrgs=None):
        method = 'endorse'
        _logger.debug(f'{method} - start - plan {self._plan.get("plan_id")}')

        timeout = self._timeout(timeout)
        sent = {}

        if requiredOrgs:
            return await self._endorseOrgs(proposal, timeout, requiredOrgs, sent)

        last_error = None
        for layout in self._plan.get('layouts', []):
            try:
                return await self._endorseLayout(layout, proposal, timeout, sent)
            except DiscoveryError as e:
                _logger.debug(f'{method} - layout {layout} failed {e}')
                last_error = e

        raise DiscoveryError(f'Endorsement plan has not been satisfied: {last_error}')

    async def _endorseLayout(self, layout, proposal, timeout, sent):
        responses = []
        for group, quantity in layout.items():
            good = []
            for endorser in self._groupPeers(group):
                if len(good) >= quantity:
                    break
                response = await self._send(endorser, proposal, timeout, sent)
                if isGoodResponse(response):
                    good.append(response)
            if len(good) < quantity:
                raise DiscoveryError(f'group {group} needs {quantity} endorsements, got {len(good)}')
            responses.extend(good)
        return responses

    async def _endorseOrgs(self, proposal, timeout, requiredOrgs, sent):
        responses = []
        for mspid in requiredOrgs:
            response = None
            for endorser in self.getEndorsers([mspid]):
                candidate = await self._send(endorser, proposal, timeout, sent)
                if isGoodResponse(candidate):
                    response = candidate
                    break
            if response is None:
                raise DiscoveryError(f'No endorsement from required organization {mspid}')
            responses.append(response)
        return responses

    async def query(self, proposal, timeout=None):
        method = 'query'
        _logger.debug(f'{method} - start')

        timeout = self._timeout(timeout)
        last_error = None
        for endorser in self.getEndorsers():
            try:
                response = await endorser.sendProposal(proposal, timeout)
            except Exception as e:
                _logger.error(f'{method} - endorser {endorser.name} failed {e}')
                last_error = e
                continue
            if isGoodResponse(response):
                return response
            last_error = response

        raise DiscoveryError(f'No endorser returned a successful query response: {last_error}')
