"""
HTTP endpoints served alongside the bot.

Only a health check is exposed; it is meant for container orchestrators
and load balancers.
"""
