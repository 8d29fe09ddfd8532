"""Provider-side methods that produce the actual outcome of an interaction.

Decorate a function, or a method of a class that can be built with no arguments, with the description of
the interaction it fulfils:

    >>> from pactverify import verify_provider
    >>> class OrderEvents:
    ...     @verify_provider('an order created event')
    ...     def order_created(self):
    ...         return {'id': 10, 'status': 'created'}

Registration happens when the defining module is imported, so the verifier imports the configured
verification modules before looking methods up.
"""
import functools
import importlib
import logging
import re

log = logging.getLogger(__name__)


class VerificationMethod:
    def __init__(self, description, func):
        functools.update_wrapper(self, func)
        self.description = description
        self.func = func
        self.owner = None
        self.name = func.__name__

    def __set_name__(self, owner, name):
        self.owner = owner
        self.name = name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return self.func.__get__(instance, owner)

    def __call__(self, *args, **kwargs):
        return self.func(*args, **kwargs)

    def __repr__(self):
        return f'<VerificationMethod {self.qualified_name} for {self.description!r}>'

    @property
    def qualified_name(self):
        return f'{self.func.__module__}.{self.func.__qualname__}'

    def invoke(self):
        if self.owner is None:
            return self.func()
        return getattr(self.owner(), self.name)()


class VerificationRegistry:
    def __init__(self):
        self.methods = []

    def verify_provider(self, description):
        def decorator(func):
            method = VerificationMethod(description, func)
            self.methods.append(method)
            log.debug(f'Registered {method}')
            return method
        return decorator

    def find_verification_methods(self, modules, include_patterns, description):
        for module in modules:
            importlib.import_module(module)
        found = []
        for method in self.methods:
            if include_patterns and not any(re.match(p, method.qualified_name) for p in include_patterns):
                continue
            log.debug(f'Found verification method {method}')
            if method.description == description:
                found.append(method)
        return found


registry = VerificationRegistry()
verify_provider = registry.verify_provider
