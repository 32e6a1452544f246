from dropbox_team_client.cli import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
