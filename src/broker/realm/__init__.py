"""Realm bounded context.

A pluggable identity and access broker. The realm presents one virtual
identity store, authorization store and credential store, delegating the
actual storage to independently configured backend connectors.
"""
