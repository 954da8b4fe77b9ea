from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path


def main(argv: list[str] | None = None) -> int:
	parser = argparse.ArgumentParser(description="Run the mud-16 PPU model headless and dump a frame")
	src = parser.add_mutually_exclusive_group()
	src.add_argument("--image", type=Path, help="Raw shared-memory image loaded at address 0")
	src.add_argument("--demo", action="store_true", help="Use the built-in demo scene (default)")
	src.add_argument("--gradient", action="store_true", help="Fill RAM with the RGB gradient test pattern")
	parser.add_argument("--frames", type=int, default=2, help="Frames to simulate (default: 2)")
	parser.add_argument("--out", type=Path, default=Path("frame.ppm"), help="Output PPM file (default: frame.ppm)")
	parser.add_argument("--wait-states", type=int, help="Memory wait states per bus read")
	parser.add_argument("--grant-timeout", type=int, help="Cycles to wait for a bus grant (default: forever)")
	parser.add_argument("--grant-delay", type=int, default=2, help="Host grant latency in cycles (default: 2)")
	parser.add_argument("--scroll", type=int, nargs=2, metavar=("X", "Y"), help="Background scroll offsets")
	parser.add_argument("--transparent", type=int, help="Transparent color index for every layer (default: 0)")
	parser.add_argument("--save-image", type=Path, help="Write the video part of shared memory to this file")
	parser.add_argument("--debug", action="store_true", help="Enable debug logging (bus and refresh events)")
	args = parser.parse_args(argv)

	if args.debug:
		logging.basicConfig(level=logging.DEBUG, format="%(message)s")

	from mud16.config import PPUConfig
	from mud16.console import Console
	from mud16.content import apply_demo_registers, fill_gradient, load_demo, save_image
	from mud16.host import Host

	overrides = {}
	if args.wait_states is not None:
		overrides["wait_states"] = args.wait_states
	if args.grant_timeout is not None:
		overrides["grant_timeout"] = args.grant_timeout
	try:
		config = PPUConfig.from_env(**overrides)
	except ValueError as exc:
		parser.error(str(exc))

	console = Console(config=config, host=Host(grant_delay=max(0, args.grant_delay)))
	if args.image is not None:
		try:
			console.load_image(args.image)
		except (OSError, ValueError) as exc:
			raise SystemExit(f"Cannot load {args.image}: {exc}") from exc
	elif args.gradient:
		fill_gradient(console.memory)
	else:
		load_demo(console.memory)
		apply_demo_registers(console.ppu.regs)

	if args.save_image is not None:
		save_image(console.memory, args.save_image)
		print(f"Saved memory image to {args.save_image}")

	console.power_on()
	regs = console.ppu.regs
	if args.scroll:
		regs.set_scroll(*args.scroll)
	if args.transparent is not None:
		regs.set_transparent(args.transparent)

	start = time.perf_counter()
	console.run_frames(max(1, args.frames))
	elapsed = time.perf_counter() - start

	refresh = console.ppu.refresh
	print(
		f"frames={console.frame_count}  cycles={console.ppu.cycles}  elapsed={elapsed:.2f}s  "
		f"refreshes={refresh.completed_frames}  missed={refresh.missed_refreshes}  "
		f"aborted={refresh.aborted_refreshes}  bus_reads={refresh.words_read}"
	)

	console.save_ppm(args.out)
	print(f"Wrote {args.out}")
	return 0


if __name__ == "__main__":
	raise SystemExit(main())
