"""nmapproc: base subcommands and version reporting for the nmap scanner."""
