"""
Application Configuration
"""

import os


def _env_float(name, default):
    value = os.environ.get(name)
    return float(value) if value else default


def _env_int(name, default):
    value = os.environ.get(name)
    return int(value) if value else default


class Config:
    """Base configuration"""

    # Flask settings
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'your-secret-key-change-in-production'
    DEBUG = True
    TESTING = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Port scanning settings
    DEFAULT_PORTS = os.environ.get('DEFAULT_PORTS', '')  # empty: catalog ports
    CONNECT_TIMEOUT = _env_float('CONNECT_TIMEOUT', 1.0)
    BANNER_TIMEOUT = _env_float('BANNER_TIMEOUT', 1.0)
    BANNER_SIZE = _env_int('BANNER_SIZE', 512)
    SCAN_TIMEOUT = _env_float('SCAN_TIMEOUT', 0) or None
    MAX_THREADS = _env_int('MAX_THREADS', 100)

    # Service detection
    DETECTORS = ['http']
    DETECTOR_WRITE_TIMEOUT = _env_float('DETECTOR_WRITE_TIMEOUT', 5.0)
    DETECTOR_READ_TIMEOUT = _env_float('DETECTOR_READ_TIMEOUT', 1.0)
    USER_AGENT = os.environ.get('USER_AGENT') or None  # random pick per request when unset

    # Collaborators
    DNS_TIMEOUT = _env_float('DNS_TIMEOUT', 5.0)
    WEBSITE_TIMEOUT = _env_float('WEBSITE_TIMEOUT', 10.0)

    # Report settings
    REPORTS_FOLDER = os.environ.get('REPORTS_FOLDER', 'reports')


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    LOG_LEVEL = 'DEBUG'


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    MAX_THREADS = 200


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    DEBUG = False
    CONNECT_TIMEOUT = 0.5
    BANNER_TIMEOUT = 0.1
    MAX_THREADS = 10
