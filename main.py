"""Entry point for the CRM duplicate-review proxy server."""

from crm_proxy.main import main

if __name__ == "__main__":
    main()
