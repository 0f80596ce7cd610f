class AbiFuzzException(Exception):
    pass


class UnsupportedWidth(AbiFuzzException):
    def __init__(self, bits, signed=True):
        u = "" if signed else "u"
        super().__init__(f"unsupported solidity type {u}int{bits}")
        self.bits = bits
        self.signed = signed


class UnsupportedType(AbiFuzzException):
    pass


class EmptyCorpus(AbiFuzzException):
    def __init__(self, message="Cannot sample from an empty corpus"):
        super().__init__(message)


class InvalidWord(AbiFuzzException):
    pass


class ABITypeParseError(AbiFuzzException):
    pass


class EncodeError(AbiFuzzException):
    pass


class DecodeError(AbiFuzzException):
    pass
