import copy
import logging

from hfn.fabric.config.config import getConfigSetting
from hfn.fabric.errors import InvalidArgument
from hfn.fabric.msp.identity import Identity, IdentityContext
from hfn.fabric.network.network import Network

_logger = logging.getLogger(__name__)


def mergeOptions(defaults, overrides):
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = mergeOptions(merged[key], value)
        else:
            merged[key] = value
    return merged


def defaultOptions():
    options = getConfigSetting('gateway-options', {})
    options['discovery'] = {
        'enabled': getConfigSetting('initialize-with-discovery', True),
        'asLocalhost': getConfigSetting('discovery-as-localhost', True),
    }
    return options


class Gateway(object):
    """Entry point for an application: holds the identity and the options
    shared by every network and contract reached through it.
    """

    def __init__(self):
        self._options = None
        self._identity = None
        self.identityContext = None
        self._channels = {}
        self._networks = {}

    async def connect(self, options):
        method = 'connect'
        _logger.debug(f'{method} - start')

        if not isinstance(options, dict):
            raise InvalidArgument('"options" must be a dict')
        if not options.get('identity'):
            raise InvalidArgument('A wallet identity must be provided in the "identity" option')

        overrides = {key: value for key, value in options.items() if key not in ('identity', 'channels')}
        self._options = mergeOptions(defaultOptions(), overrides)
        self._identity = Identity.fromObject(options['identity'])
        self.identityContext = IdentityContext(self._identity)

        for channel in options.get('channels', []):
            self.addChannel(channel)

        _logger.debug(f'{method} - connected as {self._identity.mspid}')

    def getOptions(self):
        return self._options

    def getIdentity(self):
        return self._identity

    def addChannel(self, channel):
        self._channels[channel.name] = channel

    async def getNetwork(self, networkName):
        method = 'getNetwork'
        _logger.debug(f'{method} - start - {networkName}')

        if self._options is None:
            raise InvalidArgument('Gateway is not connected')

        network = self._networks.get(networkName)
        if network:
            return network

        channel = self._channels.get(networkName)
        if not channel:
            raise InvalidArgument(f'Channel {networkName} is not known to this gateway')

        network = Network(self, channel)
        network._initialize()
        self._networks[networkName] = network
        return network

    def disconnect(self):
        _logger.debug('disconnect - start')
        for network in self._networks.values():
            network.close()
        self._networks.clear()
