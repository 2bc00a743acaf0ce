from tvsaude.utils.helpers import get_client_ip, parse_date_bound, parse_time_of_day, parse_weekdays
from tvsaude.utils.command_rules import is_blocked, find_block_rule

__all__ = ['get_client_ip', 'parse_date_bound', 'parse_time_of_day', 'parse_weekdays',
           'is_blocked', 'find_block_rule']
