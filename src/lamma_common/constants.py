"""Shared constants for the lamma tooling."""

from pathlib import Path

# PHP-FPM
BASE_FPM_PORT = 9020
FPM_LISTEN_HOST = "127.0.0.1"
LEGACY_PHP_VERSION = "5.6"
DEFAULT_PHP_VERSION = "8.1"
NOT_AVAILABLE = "N/A"

# Layout of a version directory under <prefix>/etc/php
POOL_CONFIG_RELPATH = "php-fpm.d/www.conf"
LEGACY_POOL_CONFIG_RELPATH = "php-fpm.conf"
PHP_INI_FILENAME = "php.ini"

# Hosts file
HOSTS_FILE = Path("/etc/hosts")
HOSTS_MARKER = "Lamma"

# Defaults (overridable via LammaConfig / env vars)
HOMEBREW_DIRECTORY = Path("/opt/homebrew")
DEFAULT_TLD = "test"
DEFAULT_DB_PREFIX = "wp_"
PROJECTS_FILENAME = ".woa_projects.json"

# WordPress
DEFAULT_SITE_TITLE = "My Awesome Site"
WP_CLI_PHAR_URL = "https://raw.githubusercontent.com/wp-cli/builds/gh-pages/phar/wp-cli.phar"
WP_CLI_INSTALL_PATH = Path("/usr/local/bin/wp")

# Self-signed certificates
SSL_KEY_SIZE = 2048
SSL_VALID_DAYS = 3650
