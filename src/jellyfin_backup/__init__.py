"""Jellyfin Backup - Point-in-time backup and restore for a Jellyfin server.

This application provides:
    - Backup of the Jellyfin data directory into a timestamped ZIP archive
    - Restore of the data directory from a previously created archive
    - Stopping and restarting the server (Windows service or plain process)
      around every backup and restore
    - Registration of an unattended backup in the Windows Task Scheduler

Archives are created and extracted with a portable 7-Zip which is downloaded
on first use into a ``7zip`` folder beside the program.

Package Structure:
    app: Main application entry point and text menu
    config: Paths, runtime configuration, XML settings and path validation
    core: Business logic for locating data, provisioning 7-Zip, service
        control, backup, restore and scheduling
    gui: Native folder and file pickers

Quick Start:
    Run from command line::

        python -m jellyfin_backup

    Unattended (used by the scheduled task)::

        python -m jellyfin_backup --backup-only

Configuration:
    - Config file: <program dir>/configuration.xml
    - Log file: <program dir>/jellyfin_backup.log
    - Default backups: <program dir>/Backups
"""

__version__ = "1.0.0"
__app_name__ = "Jellyfin Backup"
