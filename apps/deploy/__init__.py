"""
Push-to-deploy app.

Receives repository push webhooks and deploys the matching application
through a strict, linear chain of shell stages:
update → build → test → release

Key concepts:
- Application registry loaded once from the JSON deploy config
- Optional stop/start bracketing through a remote process supervisor
- Fail-fast: the first failing stage ends the run
- Monitoring signals at every stage boundary
"""

default_app_config = "apps.deploy.apps.DeployAppConfig"
