"""Exception types raised by the simulator."""


class ConfigurationError(ValueError):
    """Invalid or incomplete run configuration.

    Raised synchronously, before any file is opened or any ground-truth
    state is advanced: a required capability was never loaded, a provider
    was handed the wrong parameter object, or a numeric setting is out of
    its valid domain.
    """
