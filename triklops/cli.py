import argparse
import sys

from .config import ConfigurationError, load_config, register_configs, validate_config, setup_paths
from .preprocess import ReferenceImageError


# CLI flag -> config key
RUN_OVERRIDES = {
    'image_size': 'image_size',
    'num_triangles': 'num_triangles',
    'algorithm': 'algorithm',
    'seed': 'seed',
    'threads': 'threads',
    'num_generations': 'evolution.num_generations',
    'population_size': 'evolution.population_size',
    'num_selected': 'evolution.num_selected',
    'mutation_rate': 'evolution.mutation_rate',
    'degeneracy_threshold': 'evolution.degeneracy_threshold',
    'save_frequency': 'output.save_frequency',
    'output_dir': 'output.output_dir',
    'name': 'output.name',
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='triklops',
        description="Triklops - Approximate images with evolved triangles",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Run command
    run_parser = subparsers.add_parser('run', help='Approximate a reference image')
    run_parser.add_argument('input', type=str, help='Reference image path')
    run_parser.add_argument('--config', type=str, default='config.yaml',
                            help='Path to configuration file')
    run_parser.add_argument('--output-dir', dest='output_dir', type=str, help='Output directory')
    run_parser.add_argument('--name', type=str, help='Base name for output files')
    run_parser.add_argument('--image_size', type=int, help='Override image size')
    run_parser.add_argument('--num_triangles', type=int, help='Override number of triangles')
    run_parser.add_argument('--num_generations', type=int, help='Override generations per triangle')
    run_parser.add_argument('--population_size', type=int, help='Override population size')
    run_parser.add_argument('--num_selected', type=int, help='Override elite pool size')
    run_parser.add_argument('--mutation_rate', type=float, help='Override per-gene mutation rate')
    run_parser.add_argument('--algorithm', type=str, choices=['mse', 'ssim'], help='Fitness metric')
    run_parser.add_argument('--seed', type=int, help='Random seed')
    run_parser.add_argument('--degeneracy_threshold', type=float,
                            help='Minimum interior angle in degrees')
    run_parser.add_argument('--save_frequency', type=int,
                            help='Save outputs every N triangles')
    run_parser.add_argument('--threads', type=int, help='Worker threads for fitness evaluation')
    run_parser.add_argument('overrides', nargs='*', help='Additional config overrides')

    # Render command
    render_parser = subparsers.add_parser('render', help='Re-render saved triangles')
    render_parser.add_argument('triangles', type=str, help='Triangles JSON written by a run')
    render_parser.add_argument('--output', type=str, required=True, help='Output PNG path')
    render_parser.add_argument('--svg', type=str, help='Output SVG path')

    # Eval command
    eval_parser = subparsers.add_parser('eval', help='Compare a rendered image with its reference')
    eval_parser.add_argument('rendered', type=str, help='Rendered PNG path')
    eval_parser.add_argument('reference', type=str, help='Reference image path')
    eval_parser.add_argument('--metrics', type=str, default='mse,ssim,psnr',
                             help='Comma-separated list of metrics')
    eval_parser.add_argument('--config', type=str, default='config.yaml',
                             help='Path to configuration file')
    eval_parser.add_argument('--output-dir', dest='output_dir', type=str, help='Output directory')

    return parser


def parse_args(parser: argparse.ArgumentParser, argv=None) -> argparse.Namespace:
    """Parse argv, accepting dotted `key=value` overrides after the run flags."""
    args, extra = parser.parse_known_args(argv)
    unknown = [arg for arg in extra if arg.startswith('-') or '=' not in arg]
    if unknown or (extra and args.command != 'run'):
        parser.error(f"unrecognized arguments: {' '.join(unknown or extra)}")
    if extra:
        args.overrides = list(args.overrides) + extra
    return args


def main(argv=None):
    """Main CLI entry point for Triklops."""
    register_configs()
    parser = build_parser()
    args = parse_args(parser, argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == 'render':
        from .render import render
        render(args.triangles, args.output, args.svg)
        return

    # Build overrides list
    overrides = []
    for flag, key in RUN_OVERRIDES.items():
        value = getattr(args, flag, None)
        if value is not None:
            overrides.append(f'{key}={value}')
    if hasattr(args, 'overrides'):
        overrides.extend(args.overrides)

    try:
        # Load config with overrides
        cfg = load_config(args.config, overrides)

        # Validate configuration
        validate_config(cfg)

        # Setup paths
        setup_paths(cfg)

        # Execute command
        if args.command == 'run':
            from .run import run
            run(cfg, args.input)
        elif args.command == 'eval':
            from .evaluate import evaluate
            evaluate(args.rendered, args.reference, args.metrics.split(','), cfg)
    except (ConfigurationError, ReferenceImageError) as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == '__main__':
    main()
