"""Deal domain: constants, legacy adapter, calculators, exporters, UI."""
