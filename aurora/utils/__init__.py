from .logger import setup_logger
from .numbers import clamp, clean_number, dedupe, round_half_up, round_score
