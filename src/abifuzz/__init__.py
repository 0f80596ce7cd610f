from abifuzz.abi_types import abi_type_from_json, parse_abi_type
from abifuzz.calldata import fuzz_args, fuzz_calldata
from abifuzz.config import DEFAULT_CONFIG, MAX_ARRAY_LEN, StrategyConfig
from abifuzz.corpus import WordCorpus
from abifuzz.exceptions import (
    AbiFuzzException,
    EmptyCorpus,
    UnsupportedType,
    UnsupportedWidth,
)
from abifuzz.param import fuzz_param, fuzz_param_from_state
from abifuzz.types import Address
from abifuzz.uint import uint_strategy
