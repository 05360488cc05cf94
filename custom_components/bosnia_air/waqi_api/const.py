"""Constants for the WAQI API."""

from __future__ import annotations

from datetime import timedelta
from typing import Final

URL_API_BASE: Final = "https://api.waqi.info"

URL_API_FEED: Final = "{base_url}/feed/{station_id}/"

API_STATUS_OK: Final = "ok"

API_TIMEOUT: Final = 10

DATA_KIND_LIVE: Final = "live"
DATA_KIND_FORECAST: Final = "forecast"

DATA_KINDS: Final = (DATA_KIND_LIVE, DATA_KIND_FORECAST)

DATA_KIND_DAILY: Final = "daily"

# days in the daily AQI timeline, today included
DAILY_DAYS: Final = 7

DEFAULT_LIVE_TTL: Final = timedelta(minutes=10)
DEFAULT_FORECAST_TTL: Final = timedelta(hours=2)
DEFAULT_REFRESH_INTERVAL: Final = timedelta(minutes=10)
DEFAULT_TIME_ZONE: Final = "Europe/Sarajevo"

# a snapshot with the same AQI stored less than this long ago is not repeated
SNAPSHOT_DEDUP_WINDOW: Final = timedelta(minutes=5)

# pollutant keys as used in the WAQI "iaqi" and "forecast.daily" objects
POLLUTANT_PM25: Final = "pm25"
POLLUTANT_PM10: Final = "pm10"
POLLUTANT_O3: Final = "o3"
POLLUTANT_NO2: Final = "no2"
POLLUTANT_SO2: Final = "so2"
POLLUTANT_CO: Final = "co"

POLLUTANT_DISPLAY_NAMES: Final = {
    POLLUTANT_PM25: "PM2.5",
    POLLUTANT_PM10: "PM10",
    POLLUTANT_O3: "O3",
    POLLUTANT_NO2: "NO2",
    POLLUTANT_SO2: "SO2",
    POLLUTANT_CO: "CO",
}

POLLUTANT_ALIASES: Final = {
    "pm2.5": POLLUTANT_PM25,
    "pm2_5": POLLUTANT_PM25,
    "pm_25": POLLUTANT_PM25,
    "pm10.0": POLLUTANT_PM10,
    "pm10_0": POLLUTANT_PM10,
    "ozone": POLLUTANT_O3,
}

UNIT_UGM3: Final = "µg/m³"
UNIT_PPM: Final = "ppm"
UNIT_PPB: Final = "ppb"

POLLUTANT_UNITS: Final = {
    POLLUTANT_PM25: UNIT_UGM3,
    POLLUTANT_PM10: UNIT_UGM3,
    POLLUTANT_O3: UNIT_PPM,
    POLLUTANT_NO2: UNIT_PPB,
    POLLUTANT_SO2: UNIT_PPB,
    POLLUTANT_CO: UNIT_PPM,
}

# decimal places the breakpoint tables are published with, see 40 CFR 58 App. G
POLLUTANT_TRUNCATION: Final = {
    POLLUTANT_PM25: 1,
    POLLUTANT_PM10: 0,
    POLLUTANT_O3: 3,
    POLLUTANT_NO2: 0,
    POLLUTANT_SO2: 0,
    POLLUTANT_CO: 1,
}

# forecast representative AQI comes from the first pollutant present in this order
FORECAST_POLLUTANTS: Final = (POLLUTANT_PM25, POLLUTANT_PM10, POLLUTANT_O3)

# upper bound (inclusive) of each category, the last category is open ended
CATEGORY_BANDS: Final = (50, 100, 150, 200, 300)

CATEGORY_DISPLAY_NAMES: Final = (
    "Good",
    "Moderate",
    "Unhealthy for Sensitive Groups",
    "Unhealthy",
    "Very Unhealthy",
    "Hazardous",
)

CATEGORY_COLORS: Final = (
    "#00E400",
    "#FFFF00",
    "#FF7E00",
    "#FF0000",
    "#8F3F97",
    "#7E0023",
)

CATEGORY_HEALTH_MESSAGES: Final = (
    "Air quality is considered satisfactory, and air pollution poses little or no risk.",
    "Air quality is acceptable for most people. However, for some pollutants there "
    "may be a moderate health concern for a very small number of people who are "
    "unusually sensitive to air pollution.",
    "Members of sensitive groups may experience health effects. The general public "
    "is not likely to be affected.",
    "Everyone may begin to experience health effects; members of sensitive groups "
    "may experience more serious health effects.",
    "Health warnings of emergency conditions. The entire population is more likely "
    "to be affected.",
    "Health alert: everyone may experience more serious health effects.",
)

HEALTH_GROUP_ATHLETES: Final = "athletes"
HEALTH_GROUP_CHILDREN: Final = "children"
HEALTH_GROUP_ELDERLY: Final = "elderly"
HEALTH_GROUP_ASTHMATICS: Final = "asthmatics"

HEALTH_GROUP_DISPLAY_NAMES: Final = {
    HEALTH_GROUP_ATHLETES: "Athletes",
    HEALTH_GROUP_CHILDREN: "Children",
    HEALTH_GROUP_ELDERLY: "Elderly",
    HEALTH_GROUP_ASTHMATICS: "Asthmatics",
}

# highest AQI in the moderate band a group is still at low risk for
HEALTH_GROUP_THRESHOLDS: Final = {
    HEALTH_GROUP_ATHLETES: 100,
    HEALTH_GROUP_CHILDREN: 75,
    HEALTH_GROUP_ELDERLY: 75,
    HEALTH_GROUP_ASTHMATICS: 50,
}

# recommendations per group, indexed by AQI category
HEALTH_GROUP_RECOMMENDATIONS: Final = {
    HEALTH_GROUP_ATHLETES: (
        "Ideal conditions for outdoor training.",
        "Training is fine, shorten intense sessions if you notice symptoms.",
        "Reduce intense outdoor training, prefer indoor workouts.",
        "Move training indoors.",
        "Avoid any outdoor physical activity.",
        "Do not train outdoors.",
    ),
    HEALTH_GROUP_CHILDREN: (
        "Safe for outdoor play.",
        "Outdoor play is fine, watch sensitive children for symptoms.",
        "Limit prolonged outdoor play.",
        "Keep children indoors where possible.",
        "Children should stay indoors.",
        "Children must stay indoors with windows closed.",
    ),
    HEALTH_GROUP_ELDERLY: (
        "Safe for walks and outdoor activities.",
        "Outdoor activities are fine, take breaks when needed.",
        "Shorten time spent outdoors.",
        "Avoid outdoor activities.",
        "Stay indoors and avoid exertion.",
        "Stay indoors and follow medical advice.",
    ),
    HEALTH_GROUP_ASTHMATICS: (
        "Normal activities, keep your inhaler with you.",
        "Keep your inhaler at hand and limit exertion outdoors.",
        "Avoid prolonged exertion outdoors and follow your treatment plan.",
        "Stay indoors and keep your medication close.",
        "Stay indoors, contact your doctor if symptoms worsen.",
        "Stay indoors, seek medical help if you have difficulty breathing.",
    ),
}
