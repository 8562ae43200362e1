"""
csp-policy - Content-Security-Policy header builder
"""

__version__ = "0.1.0"

from csp_policy.policy.builder import EmptyContentSecurityPolicy, PolicyBuilder
from csp_policy.policy.defaults import ContentSecurityPolicy
from csp_policy.policy.domains import DomainList

__all__ = ['PolicyBuilder', 'EmptyContentSecurityPolicy', 'ContentSecurityPolicy', 'DomainList']
