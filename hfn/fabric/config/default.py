DEFAULT = {
    'discovery-as-localhost': True,
    'initialize-with-discovery': True,
    'discovery-cache-life': 300,  # seconds
    'request-timeout': 45,  # seconds
    'gateway-options': {
        'eventHandlerOptions': {
            'commitTimeout': 300,
            'endorseTimeout': 30,
        },
        'queryHandlerOptions': {
            'timeout': 30,
        },
    },
}
