class TaxobotError(Exception):
    """Base class for every failure the bot reports."""


class ConfigError(TaxobotError):
    pass


class MalformedIdentifierError(TaxobotError):
    """An image path does not follow the `<Ge>_<species>.jpg` convention."""


class LookupTableError(TaxobotError):
    pass


class UnknownGenusError(TaxobotError):
    """The genus code of an image is missing from the lookup table.

    This is a catalog mismatch and is never retried.
    """

    def __init__(self, genus_code):
        super().__init__(f"Genus abbreviation not found in the lookup table: {genus_code!r}")
        self.genus_code = genus_code


class EnrichmentError(TaxobotError):
    pass


class PublishError(TaxobotError):
    pass


class PoolSourceError(TaxobotError):
    pass
