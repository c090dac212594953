from . import config, phases, reconcile, status, token

__all__ = ['config', 'phases', 'reconcile', 'status', 'token']
