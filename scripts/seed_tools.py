#!/usr/bin/env python3
"""
Seed the toolscout catalog with a list of well-known tools.
URLs already present in the catalog are skipped, so the script can be rerun.
"""

import os
import sys
import asyncio
import argparse
import logging
from typing import Any, Dict, List, Optional

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.settings import ServiceConfig
from indexer.sqlite_adapter import ToolCatalog
from observability.logging import configure_logging
from services.shared.models import ToolCreate

logger = logging.getLogger(__name__)

DEFAULT_TOOLS: List[Dict[str, Any]] = [
    {
        "name": "GitHub",
        "url": "https://github.com",
        "summary": "A platform for version control and collaboration. Host and review code, manage projects, and build software alongside millions of developers.",
        "categories": ["development", "collaboration", "devops"]
    },
    {
        "name": "VS Code",
        "url": "https://code.visualstudio.com",
        "summary": "A lightweight but powerful source code editor. Comes with built-in support for JavaScript, TypeScript and Node.js and has a rich ecosystem of extensions.",
        "categories": ["development", "productivity", "editor"]
    },
    {
        "name": "Figma",
        "url": "https://figma.com",
        "summary": "A collaborative interface design tool. Create, test, and ship better designs from start to finish. Design, prototype, and gather feedback all in one place.",
        "categories": ["design", "collaboration", "productivity"]
    },
    {
        "name": "MongoDB",
        "url": "https://mongodb.com",
        "summary": "A document database with the scalability and flexibility that you want with the querying and indexing that you need. Designed to help developers build and scale applications.",
        "categories": ["database", "cloud", "development"]
    },
    {
        "name": "Postman",
        "url": "https://postman.com",
        "summary": "A collaboration platform for API development. Simplify each step of building an API and streamline collaboration so you can create better APIs faster.",
        "categories": ["development", "testing", "api"]
    },
    {
        "name": "Docker",
        "url": "https://docker.com",
        "summary": "A platform for developing, shipping, and running applications in containers. Separate applications from infrastructure for fast software delivery.",
        "categories": ["devops", "development", "cloud"]
    },
    {
        "name": "Slack",
        "url": "https://slack.com",
        "summary": "A business communication platform. Real-time messaging, archiving and search for modern teams. Integrate with the tools you already use.",
        "categories": ["communication", "collaboration", "productivity"]
    },
    {
        "name": "Notion",
        "url": "https://notion.so",
        "summary": "All-in-one workspace for notes, docs, wikis, projects, and collaboration. Write, plan, collaborate, and get organized in one place.",
        "categories": ["productivity", "documentation", "collaboration"]
    },
    {
        "name": "AWS",
        "url": "https://aws.amazon.com",
        "summary": "Comprehensive cloud computing platform. Offering over 200 fully featured services from data centers globally for building sophisticated applications.",
        "categories": ["cloud", "devops", "development"]
    },
    {
        "name": "Jira",
        "url": "https://www.atlassian.com/software/jira",
        "summary": "Project and issue tracking software. Plan, track, and manage agile and software development projects with customizable workflows.",
        "categories": ["productivity", "collaboration", "project-management"]
    },
    {
        "name": "ChatGPT",
        "url": "https://chat.openai.com",
        "summary": "Advanced AI language model for conversation and assistance. Helps with writing, analysis, coding, and answering questions across various domains.",
        "categories": ["ai", "productivity", "development"]
    },
    {
        "name": "Kubernetes",
        "url": "https://kubernetes.io",
        "summary": "Open-source container orchestration platform. Automate deployment, scaling, and management of containerized applications.",
        "categories": ["devops", "cloud", "automation"]
    },
    {
        "name": "Grafana",
        "url": "https://grafana.com",
        "summary": "Open-source analytics and monitoring solution. Query, visualize, alert on, and understand your metrics from multiple data sources.",
        "categories": ["monitoring", "analytics", "devops"]
    },
    {
        "name": "Stripe",
        "url": "https://stripe.com",
        "summary": "Payment processing platform for internet businesses. APIs and tools for accepting payments, sending payouts, and managing online businesses.",
        "categories": ["development", "finance", "api"]
    },
    {
        "name": "Vercel",
        "url": "https://vercel.com",
        "summary": "Platform for frontend frameworks and static sites. Deploy web projects with zero configuration, automatic SSL, and global CDN.",
        "categories": ["development", "deployment", "cloud"]
    },
    {
        "name": "Linear",
        "url": "https://linear.app",
        "summary": "Issue tracking tool built for high-performance teams. Streamline software projects, sprints, tasks, and bug tracking.",
        "categories": ["productivity", "project-management", "collaboration"]
    },
    {
        "name": "Supabase",
        "url": "https://supabase.com",
        "summary": "Open source Firebase alternative. Create a backend in less than 2 minutes with realtime subscriptions, authentication, and storage.",
        "categories": ["development", "database", "backend"]
    },
    {
        "name": "Cloudflare",
        "url": "https://cloudflare.com",
        "summary": "Web infrastructure and security company. Provide content delivery network services, DDoS mitigation, Internet security, and DNS services.",
        "categories": ["security", "cloud", "networking"]
    },
    {
        "name": "GitLab",
        "url": "https://gitlab.com",
        "summary": "Complete DevOps platform. Plan, create, verify, package, release, configure, monitor, and secure your applications.",
        "categories": ["development", "devops", "collaboration"]
    },
    {
        "name": "Datadog",
        "url": "https://datadoghq.com",
        "summary": "Monitoring and analytics platform. Monitor your entire technology stack with infrastructure monitoring, application performance monitoring, log management, and user experience monitoring.",
        "categories": ["monitoring", "analytics", "devops"]
    },
    {
        "name": "Auth0",
        "url": "https://auth0.com",
        "summary": "Authentication and authorization platform. Add authentication to applications with multiple identity providers and secure access for users.",
        "categories": ["security", "development", "api"]
    },
    {
        "name": "Miro",
        "url": "https://miro.com",
        "summary": "Online collaborative whiteboarding platform. Work together on brainstorming, process mapping, UX research, agile workflows, and more.",
        "categories": ["collaboration", "design", "productivity"]
    },
    {
        "name": "Sentry",
        "url": "https://sentry.io",
        "summary": "Application monitoring and error tracking software. Track, monitor, and fix crashes in your applications in real time.",
        "categories": ["monitoring", "development", "debugging"]
    },
    {
        "name": "Retool",
        "url": "https://retool.com",
        "summary": "Platform for building internal tools. Build custom internal software faster with pre-built components and direct database access.",
        "categories": ["development", "productivity", "automation"]
    },
    {
        "name": "Twilio",
        "url": "https://twilio.com",
        "summary": "Cloud communications platform. Add messaging, voice, and video to your applications with APIs for SMS, voice, video, and authentication.",
        "categories": ["communication", "api", "development"]
    },
    {
        "name": "Webflow",
        "url": "https://webflow.com",
        "summary": "Visual web development platform. Design, build, and launch responsive websites visually while generating clean, semantic code.",
        "categories": ["design", "development", "no-code"]
    },
    {
        "name": "New Relic",
        "url": "https://newrelic.com",
        "summary": "Observability platform for software engineers. Monitor, debug, and improve your entire technology stack with full-stack observability.",
        "categories": ["monitoring", "devops", "analytics"]
    },
    {
        "name": "Asana",
        "url": "https://asana.com",
        "summary": "Work management platform. Organize team projects, manage tasks, track progress, and achieve goals together.",
        "categories": ["productivity", "collaboration", "project-management"]
    },
    {
        "name": "Netlify",
        "url": "https://netlify.com",
        "summary": "Platform for modern web development. Build, deploy, and scale modern web applications with serverless functions and continuous deployment.",
        "categories": ["development", "deployment", "cloud"]
    },
    {
        "name": "Zapier",
        "url": "https://zapier.com",
        "summary": "Automation platform for connecting apps and workflows. Connect your apps and automate workflows without coding.",
        "categories": ["automation", "productivity", "integration"]
    }
]


class ToolSeeder:
    """Inserts a built-in tool list into the catalog."""

    def __init__(self, catalog: ToolCatalog):
        self.catalog = catalog

    async def reset(self) -> int:
        """Delete every tool in the catalog and return how many were removed."""
        tools = await self.catalog.list_tools()
        for tool in tools:
            await self.catalog.delete_tool(tool.id)
        logger.info(f"Removed {len(tools)} existing tools")
        return len(tools)

    async def seed(self, tools: Optional[List[Dict[str, Any]]] = None,
                   dry_run: bool = False) -> Dict[str, int]:
        """Insert ``tools`` (default ``DEFAULT_TOOLS``), skipping known URLs."""
        stats = {'inserted': 0, 'skipped': 0}

        for raw in (DEFAULT_TOOLS if tools is None else tools):
            tool = ToolCreate(**raw)
            existing = await self.catalog.get_by_url(tool.url)
            if existing:
                logger.debug(f"Skipping {tool.name}: already stored as {existing.name!r}")
                stats['skipped'] += 1
                continue

            if dry_run:
                logger.info(f"[dry-run] Would insert {tool.name} ({tool.url})")
            else:
                await self.catalog.insert_tool(tool)
            stats['inserted'] += 1

        return stats


async def main():
    """Main seeding function."""
    parser = argparse.ArgumentParser(description="Seed the toolscout catalog with well-known tools")
    parser.add_argument("--db", help="Path to SQLite catalog (defaults to configured db_path)")
    parser.add_argument("--config", help="Optional YAML config file")
    parser.add_argument("--dry-run", action="store_true", help="Report what would be inserted without writing")
    parser.add_argument("--reset", action="store_true", help="Delete existing tools before seeding")

    args = parser.parse_args()

    config = ServiceConfig.load(args.config)
    configure_logging(config)

    catalog = ToolCatalog(args.db or config.db_path)
    await catalog.initialize()
    try:
        seeder = ToolSeeder(catalog)
        if args.reset and not args.dry_run:
            await seeder.reset()
        stats = await seeder.seed(dry_run=args.dry_run)
        print(f"🌱 Seeding complete: {stats['inserted']} inserted, {stats['skipped']} skipped")
    finally:
        await catalog.close()


if __name__ == "__main__":
    asyncio.run(main())
