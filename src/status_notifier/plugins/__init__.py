"""Built-in delivery channels.

Each sub-package exposes ``provider.create_provider(*, config, logger)``,
which ``ProviderRegistry.with_builtins()`` imports the first time a
provider of that type is loaded.
"""
