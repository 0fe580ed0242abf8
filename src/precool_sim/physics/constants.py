"""Physical constants for produce cooling calculations.

Reference: ASHRAE Handbook—Fundamentals (2021), ASHRAE Handbook—Refrigeration
(2022), Chapter 28 (Methods of Precooling Fruits, Vegetables, and Cut Flowers).

All values use SI units.
"""

from typing import Final

# =============================================================================
# Air Properties
# =============================================================================

#: Specific heat of dry air at constant pressure (J/(kg·K))
#: ASHRAE Handbook—Fundamentals, Chapter 1
C_P_DRY_AIR: Final[float] = 1006.0

#: Gas constant for dry air (J/(kg·K))
#: R_air = R_universal / M_air = 8314.462 / 28.966
GAS_CONSTANT_DRY_AIR: Final[float] = 287.055

#: Gas constant for water vapor (J/(kg·K))
#: R_water = R_universal / M_water = 8314.462 / 18.015
GAS_CONSTANT_WATER_VAPOR: Final[float] = 461.5

#: Ratio of molecular weights water/dry air, rounded (dimensionless)
#: Used in humidity ratio calculations: W = 0.622 * p_w / (p - p_w)
EPSILON: Final[float] = 0.622

#: Dynamic viscosity of air at 20°C (Pa·s)
DYNAMIC_VISCOSITY_AIR: Final[float] = 1.81e-5

# =============================================================================
# Water Properties
# =============================================================================

#: Latent heat of vaporization near product surface temperatures (J/kg)
LATENT_HEAT_VAPORIZATION: Final[float] = 2.45e6

# =============================================================================
# Standard Conditions
# =============================================================================

#: Standard atmospheric pressure (Pa)
STANDARD_PRESSURE: Final[float] = 101325.0

#: Worst-case (warmest) air temperature used for stability bounds (°C)
#: Lowest density gives the highest duct velocity for a fixed mass flow.
WORST_CASE_AIR_TEMPERATURE: Final[float] = 40.0

# =============================================================================
# Saturation Pressure (Magnus form, over water)
# =============================================================================

#: Saturation vapor pressure at 0°C (Pa)
MAGNUS_P0: Final[float] = 611.2

#: Magnus coefficient (dimensionless)
MAGNUS_A: Final[float] = 17.67

#: Magnus coefficient (°C)
MAGNUS_B: Final[float] = 243.5

# =============================================================================
# Forced-Convection Correlations
# =============================================================================

#: Reference Reynolds number at which the convective enhancement equals 1
REFERENCE_REYNOLDS: Final[float] = 5000.0

#: Reynolds exponent of the convective enhancement f(Re) = (Re/Re_ref)^n
REYNOLDS_EXPONENT: Final[float] = 0.8

#: Turbulence intensity correlation I = C * Re^(-1/8) for fully developed duct flow
TURBULENCE_INTENSITY_COEFFICIENT: Final[float] = 0.16

#: Turbulence intensity Reynolds exponent
TURBULENCE_INTENSITY_EXPONENT: Final[float] = -0.125

# =============================================================================
# Temperature Conversions
# =============================================================================


def celsius_to_kelvin(t_celsius: float) -> float:
    """Convert temperature from Celsius to Kelvin.

    Args:
        t_celsius: Temperature in degrees Celsius.

    Returns:
        Temperature in Kelvin.
    """
    return t_celsius + 273.15
