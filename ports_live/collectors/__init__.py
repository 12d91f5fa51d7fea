from .lsof import parse_addr, parse_field_output, parse_lsof_output, parse_tabular_output
from .scanner import PortScanner, run_command
