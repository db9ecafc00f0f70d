"""Allow ``python -m zabbix_netbox_sync``."""

import sys

from zabbix_netbox_sync.sync.cli import main

sys.exit(main())
