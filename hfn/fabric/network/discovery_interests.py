import logging

from hfn.fabric.errors import InvalidArgument

_logger = logging.getLogger(__name__)

INTEREST_ERROR = '"interest" parameter must be a DiscoveryInterest object'


def toDiscoveryInterest(interest):
    """Validate ``interest`` and return it as a new dict.

    Accepts a dict or any object exposing a ``name`` string, with optional
    ``collectionNames`` (sequence of strings) and ``noPrivateReads`` (bool).
    """
    if isinstance(interest, dict):
        fields = interest
    elif interest is not None and not isinstance(interest, (str, bytes)) and hasattr(interest, 'name'):
        fields = {key: getattr(interest, key) for key in ('name', 'collectionNames', 'noPrivateReads')
                  if getattr(interest, key, None) is not None}
    else:
        raise InvalidArgument(INTEREST_ERROR)

    name = fields.get('name')
    if not isinstance(name, str) or not name:
        raise InvalidArgument(INTEREST_ERROR)

    result = {'name': name}

    collection_names = fields.get('collectionNames')
    if collection_names is not None:
        if isinstance(collection_names, (str, bytes)) \
                or not all(isinstance(c, str) and c for c in collection_names):
            raise InvalidArgument('"collectionNames" must be a list of non-empty strings')
        result['collectionNames'] = list(collection_names)

    if fields.get('noPrivateReads') is not None:
        result['noPrivateReads'] = bool(fields['noPrivateReads'])

    return result


class DiscoveryInterestSet(object):
    """Ordered discovery interests of one contract, at most one per chaincode name.

    The default interest for the contract's own chaincode is only created
    when the set is first read or written.
    """

    def __init__(self, chaincodeId, collections=None):
        self._chaincode_id = chaincodeId
        self._collections = list(collections or [])
        self._interests = None

    @property
    def initialized(self):
        return self._interests is not None

    def ensureDefault(self):
        if self._interests is None:
            default = {'name': self._chaincode_id}
            if self._collections:
                default['collectionNames'] = list(self._collections)
            _logger.debug(f'ensureDefault - seeding default interest {default}')
            self._interests = [default]

    def add(self, interest):
        method = 'add'

        # validated before any mutation
        new_interest = toDiscoveryInterest(interest)
        self.ensureDefault()

        # linear scan, a contract only carries a handful of interests
        for index, existing in enumerate(self._interests):
            if existing['name'] == new_interest['name']:
                _logger.debug(f'{method} - replacing interest {existing} with {new_interest}')
                self._interests[index] = new_interest
                return self

        _logger.debug(f'{method} - adding interest {new_interest}')
        self._interests.append(new_interest)
        return self

    def getInterests(self):
        self.ensureDefault()
        return self.snapshot()

    def snapshot(self):
        if self._interests is None:
            return []
        return [dict(interest, **self._copyCollections(interest)) for interest in self._interests]

    @staticmethod
    def _copyCollections(interest):
        if 'collectionNames' in interest:
            return {'collectionNames': list(interest['collectionNames'])}
        return {}

    def __len__(self):
        return len(self._interests) if self._interests is not None else 0

    def __iter__(self):
        return iter(self.snapshot())
