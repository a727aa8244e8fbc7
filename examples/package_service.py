"""Bundle three functions with esbuild and package them with npm-installed externals."""

from pathlib import Path

from fnbundle import (
    BatchBundler,
    BuildConfiguration,
    EsbuildCompiler,
    FunctionEntry,
    StructuredLogger,
    get_packager,
    pack_functions,
)
from fnbundle.scope import temp_path_scope


def package_service() -> None:
    config = BuildConfiguration.from_mapping(
        {
            "target": "node20",
            "concurrency": 2,
            "external": ["sharp"],
            "exclude": ["@aws-sdk/*"],
            "packager": "npm",
            "sourcemap": "linked",
        },
    )
    entries = [
        FunctionEntry(entry="src/users.ts", function={"handler": "src/users.list"}, alias="listUsers"),
        FunctionEntry(entry="src/users.ts", function={"handler": "src/users.create"}, alias="createUser"),
        FunctionEntry(entry="src/thumbnails.ts", function={"handler": "src/thumbnails.handler"}, alias="thumbs"),
    ]
    logger = StructuredLogger()
    build_dir = Path(".esbuild/.build")

    results = BatchBundler(compiler=EsbuildCompiler(), build_dir=build_dir, logger=logger).bundle(entries, config)

    packager = get_packager(config.packager)
    with temp_path_scope("externals") as install_dir:
        (install_dir / "package.json").write_text(
            '{"dependencies": {"sharp": "^0.33.0"}}\n',
            encoding="utf-8",
        )
        packager.install(install_dir, config.install_extra_args, False)
        packager.prune(install_dir)
        manifest = pack_functions(
            results,
            build_dir=build_dir,
            output_dir=Path(".serverless"),
            modules_dir=install_dir / "node_modules",
            native_zip=config.native_zip,
            zip_concurrency=config.zip_concurrency,
            logger=logger,
        )

    manifest.to_json(Path(".serverless/artifacts.json"))
    logger.to_json_lines(Path(".serverless/build-log.jsonl"))


if __name__ == "__main__":
    package_service()
