"""Summary of what to do once the project exists."""

from __future__ import annotations

from pathlib import Path

from appstart.utils import input_text, pretty_path, print_msg, strong

DOCS_URL = "https://ion.link/docs"
ENTERPRISE_URL = "https://ion.link/enterprise-edition"


def next_steps(project_dir: Path, cloned: bool, link_confirmed: bool, is_capacitor: bool) -> list[str]:
    res_command = "cordova-res --skip-config --copy" if is_capacitor else "cordova-res"
    steps = [
        f"Go to your {'cloned' if cloned else 'new'} project: "
        f"{input_text(f'cd {pretty_path(project_dir)}')}",
        f"Run {input_text('ionic serve')} within the app directory to see your app in the browser",
        (
            f"Run {input_text('ionic capacitor add')} to add a native iOS or Android project using Capacitor"
            if is_capacitor
            else f"Run {input_text('ionic cordova platform add')} to add a native iOS or Android project using Cordova"
        ),
        f"Generate your app icon and splash screens using {input_text(res_command)}",
        f"Explore the Ionic docs for components, tutorials, and more: {strong(DOCS_URL)}",
        f"Building an enterprise app? Ionic has Enterprise Support and Features: {strong(ENTERPRISE_URL)}",
    ]

    if link_confirmed:
        steps.append(
            "Push your code to Ionic Appflow to perform real-time updates, and more: "
            f"{input_text('git push ionic master')}"
        )
    return steps


def show_next_steps(project_dir: Path, cloned: bool, link_confirmed: bool, is_capacitor: bool) -> None:
    steps = next_steps(project_dir, cloned, link_confirmed, is_capacitor)
    lines = "\n".join(f" - {step}" for step in steps)
    print_msg(f"{strong('Your app is ready! Follow these next steps')}:\n{lines}")
