class IpaUtilsError(Exception):
    """Base class for every fatal error raised by ipautils"""


class InputError(IpaUtilsError):
    """A required argument is missing or a referenced file does not exist"""


class ArchiveError(IpaUtilsError):
    """The archive is unreadable, corrupt or has no app bundle"""


class ParseError(IpaUtilsError):
    """A provisioning profile or certificate could not be decoded"""


class EntitlementsIOError(IpaUtilsError):
    """The entitlements template could not be read or the result written"""


class SigningError(IpaUtilsError):
    """codesign returned a non-zero exit status"""


class ConversionError(IpaUtilsError):
    """openssl failed to convert a PKCS#12 bundle"""


class KeychainError(IpaUtilsError):
    """security failed to list keychain identities"""


class ConfigError(IpaUtilsError, ValueError):
    """The configuration file could not be loaded"""
