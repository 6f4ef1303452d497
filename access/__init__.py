"""Access application package.

Guards write requests: bearer tokens are verified against the identity
provider, then the authorization gate checks the email claims against the
configured allow-list.  Read requests are always public.
"""
