# unit_manager/converter.py

from core.catalog import convert_in


def convert_length(value: float, from_sym: str, to_sym: str) -> float:
    return convert_in("length", value, from_sym, to_sym)

def convert_mass(value: float, from_sym: str, to_sym: str) -> float:
    return convert_in("mass", value, from_sym, to_sym)

def convert_volume(value: float, from_sym: str, to_sym: str) -> float:
    return convert_in("volume", value, from_sym, to_sym)

def convert_time(value: float, from_sym: str, to_sym: str) -> float:
    return convert_in("time", value, from_sym, to_sym)

def convert_speed(value: float, from_sym: str, to_sym: str) -> float:
    return convert_in("speed", value, from_sym, to_sym)

def convert_force(value: float, from_sym: str, to_sym: str) -> float:
    return convert_in("force", value, from_sym, to_sym)

def convert_pressure(value: float, from_sym: str, to_sym: str) -> float:
    return convert_in("pressure", value, from_sym, to_sym)

def convert_energy(value: float, from_sym: str, to_sym: str) -> float:
    return convert_in("energy", value, from_sym, to_sym)

def convert_power(value: float, from_sym: str, to_sym: str) -> float:
    return convert_in("power", value, from_sym, to_sym)

def convert_data(value: float, from_sym: str, to_sym: str) -> float:
    return convert_in("data", value, from_sym, to_sym)
