"""
Infrastructure implementations of the core collaborator interfaces, plus
configuration and logging.
"""
