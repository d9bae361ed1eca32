"""Framework detection from structural markers, manifests and CDN references."""

from __future__ import annotations

import json
from typing import Optional, Sequence, Tuple

from ..logging import get_logger
from ..models import DetectedValue
from . import manifests
from .base import (
    JS_LANGUAGES,
    DetectionContext,
    Detector,
    first_match,
    match_cdn,
    match_dependency,
    match_module_prefix,
)

logger = get_logger("stack.framework")

STRUCTURAL_CONFIDENCE = 0.95
MANIFEST_CONFIDENCE = 0.90

NODE_FRAMEWORKS: Sequence[Tuple[str, str]] = (
    ("next", "Next.js"),
    ("nuxt", "Nuxt"),
    ("@remix-run/react", "Remix"),
    ("@angular/core", "Angular"),
    ("vue", "Vue"),
    ("svelte", "Svelte"),
    ("solid-js", "SolidJS"),
    ("react", "React"),
    ("express", "Express"),
    ("fastify", "Fastify"),
    ("hono", "Hono"),
    ("@nestjs/core", "NestJS"),
    ("electron", "Electron"),
)

VITE_UI_FRAMEWORKS = frozenset({"Vue", "Svelte", "SolidJS", "React"})

CDN_FRAMEWORKS: Sequence[Tuple[str, str]] = (
    ("unpkg.com/react", "React"),
    ("cdn.jsdelivr.net/npm/react", "React"),
    ("cdnjs.cloudflare.com/ajax/libs/react", "React"),
    ("unpkg.com/vue", "Vue"),
    ("cdn.jsdelivr.net/npm/vue", "Vue"),
    ("unpkg.com/@angular", "Angular"),
    ("cdn.jsdelivr.net/npm/@angular", "Angular"),
    ("unpkg.com/svelte", "Svelte"),
    ("unpkg.com/alpinejs", "Alpine.js"),
    ("cdn.jsdelivr.net/npm/alpinejs", "Alpine.js"),
)

PYTHON_FRAMEWORKS: Sequence[Tuple[str, str]] = (
    ("django", "Django"),
    ("fastapi", "FastAPI"),
    ("flask", "Flask"),
    ("starlette", "Starlette"),
    ("tornado", "Tornado"),
)

RUST_FRAMEWORKS: Sequence[Tuple[str, str]] = (
    ("tauri", "Tauri"),
    ("actix-web", "Actix Web"),
    ("axum", "Axum"),
    ("rocket", "Rocket"),
    ("warp", "Warp"),
    ("leptos", "Leptos"),
    ("yew", "Yew"),
    ("dioxus", "Dioxus"),
)

GO_FRAMEWORKS: Sequence[Tuple[str, str]] = (
    ("github.com/gin-gonic/gin", "Gin"),
    ("github.com/gofiber/fiber", "Fiber"),
    ("github.com/labstack/echo", "Echo"),
    ("github.com/gorilla/mux", "Gorilla Mux"),
)

RUBY_FRAMEWORKS: Sequence[Tuple[str, str]] = (("rails", "Rails"), ("sinatra", "Sinatra"))


class FrameworkDetector(Detector):
    """Structural markers win, then the language's own manifest."""

    category = "framework"

    def detect(self, context: DetectionContext) -> Optional[DetectedValue]:
        structural = self._chrome_extension(context) or self._tauri(context)
        if structural is not None:
            return structural

        language = context.language_name
        if language in JS_LANGUAGES:
            return first_match(lambda: self._node(context), lambda: self._cdn(context))
        if not language:
            return self._cdn(context)
        if language == "Python":
            return self._python(context)
        if language == "Rust":
            return match_dependency(
                context.cargo_dependencies(),
                RUST_FRAMEWORKS,
                confidence=MANIFEST_CONFIDENCE,
                manifest="Cargo.toml",
            )
        if language == "Go":
            return match_module_prefix(
                context.go_modules(), GO_FRAMEWORKS, confidence=MANIFEST_CONFIDENCE, manifest="go.mod"
            )
        if language == "Ruby":
            return match_dependency(
                manifests.load_gemfile_gems(context.tree),
                RUBY_FRAMEWORKS,
                confidence=MANIFEST_CONFIDENCE,
                manifest="Gemfile",
            )
        if language == "PHP":
            return self._php(context)
        if language == "Dart":
            return self._flutter(context)
        if language in {"Java", "Kotlin"}:
            return self._spring(context)
        return None

    @staticmethod
    def _chrome_extension(context: DetectionContext) -> Optional[DetectedValue]:
        text = context.tree.read_optional("manifest.json")
        if text is None:
            return None
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            logger.debug("manifest.json is not valid JSON; skipping extension check")
            return None
        if not isinstance(data, dict) or "manifest_version" not in data:
            return None
        return DetectedValue(
            value="Chrome Extension",
            confidence=STRUCTURAL_CONFIDENCE,
            source=f"manifest.json with manifest_version {data['manifest_version']}",
        )

    @staticmethod
    def _tauri(context: DetectionContext) -> Optional[DetectedValue]:
        if not context.tree.is_dir("src-tauri"):
            return None
        return DetectedValue(
            value="Tauri", confidence=STRUCTURAL_CONFIDENCE, source="src-tauri directory found"
        )

    @staticmethod
    def _node(context: DetectionContext) -> Optional[DetectedValue]:
        deps = context.node_dependencies()
        for package, value in NODE_FRAMEWORKS:
            if package not in deps:
                continue
            if value in VITE_UI_FRAMEWORKS and "vite" in deps:
                source = f"{package} + Vite in package.json dependencies"
            else:
                source = f"{package} in package.json dependencies"
            return DetectedValue(value=value, confidence=MANIFEST_CONFIDENCE, source=source)
        return None

    @staticmethod
    def _cdn(context: DetectionContext) -> Optional[DetectedValue]:
        return match_cdn(context, CDN_FRAMEWORKS, "CDN script tag in HTML")

    @staticmethod
    def _python(context: DetectionContext) -> Optional[DetectedValue]:
        return first_match(
            lambda: match_dependency(
                manifests.load_pyproject_dependencies(context.tree),
                PYTHON_FRAMEWORKS,
                confidence=0.90,
                manifest="pyproject.toml",
            ),
            lambda: match_dependency(
                manifests.load_requirements(context.tree),
                PYTHON_FRAMEWORKS,
                confidence=0.85,
                manifest="requirements.txt",
            ),
        )

    @staticmethod
    def _php(context: DetectionContext) -> Optional[DetectedValue]:
        packages = manifests.load_composer_packages(context.tree)
        if "laravel/framework" in packages:
            return DetectedValue("Laravel", MANIFEST_CONFIDENCE, "laravel/framework in composer.json")
        for package in packages:
            if package.startswith("symfony/"):
                return DetectedValue("Symfony", 0.85, f"{package} in composer.json")
        return None

    @staticmethod
    def _flutter(context: DetectionContext) -> Optional[DetectedValue]:
        pubspec = manifests.load_pubspec(context.tree)
        deps = pubspec.get("dependencies")
        if isinstance(deps, dict) and "flutter" in deps:
            return DetectedValue("Flutter", 0.95, "flutter dependency in pubspec.yaml")
        return None

    @staticmethod
    def _spring(context: DetectionContext) -> Optional[DetectedValue]:
        for dep in context.java_dependencies():
            lower = dep.lower()
            if "spring-boot" in lower or "springframework" in lower:
                return DetectedValue("Spring Boot", MANIFEST_CONFIDENCE, f"{dep} in build manifest")
        return None
