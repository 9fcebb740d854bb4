# utils/config.py
import os

SERVICE_A_BASE_URL = os.getenv("SERVICE_A_BASE_URL", "http://127.0.0.1:8824")
API_HTTP_TIMEOUT = float(os.getenv("API_HTTP_TIMEOUT", "15.0"))
ACCESS_COOKIE_NAME = os.getenv("ACCESS_COOKIE_NAME", "access_token")

# Múi giờ "local" dùng cho ranh giới tháng và timestamp không có offset
DASHBOARD_TZ = os.getenv("DASHBOARD_TZ", "Asia/Ho_Chi_Minh")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
BRAND_NAME = os.getenv("BRAND_NAME", "Hosting Admin")
