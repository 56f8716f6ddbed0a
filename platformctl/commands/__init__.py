from . import compose, config, lookup

__all__ = ['compose', 'config', 'lookup']
