from abifuzz.abi.abi_decoder import abi_decode
from abifuzz.abi.abi_encoder import abi_encode
from abifuzz.exceptions import DecodeError, EncodeError
