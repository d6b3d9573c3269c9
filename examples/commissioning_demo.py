#!/usr/bin/env python3
"""
Example: Commissioning a PLC through its webserver API

Runs the commissioning sequence against the in-memory simulated webserver:
  1. Connect with an explicit transport trust configuration
  2. Verify the device exposes the required API methods
  3. Stop the PLC, write and read back program variables
  4. Browse the program's data blocks
  5. Return the PLC to Run

Connection settings and required methods come from config/plc.yml.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config.config_loader import ConfigLoader
from plc_commissioning.protocols.webserver import (
    BrowseMode,
    OperatingMode,
    ReadWriteMode,
    RPCController,
    SimulatedWebserverAdapter,
    TransportConfig,
)
from plc_commissioning.security.logging_system import configure_logging


async def main():
    """Commissioning demonstration."""

    print("=" * 70)
    print("PLC Webserver Commissioning")
    print("=" * 70)
    print()

    # ================================================================
    # STEP 1: Load configuration and connect
    # ================================================================
    print("[1/5] Loading configuration via ConfigLoader...")

    config = ConfigLoader(config_dir=project_root / "config").load_all()
    configure_logging(**config["logging"])

    # Bench PLCs ship self-signed certificates; trust is chosen per transport
    config["transport"]["verify_certificate"] = False

    def make_transport(transport_config: TransportConfig):
        return SimulatedWebserverAdapter(config=transport_config)

    rpc = await RPCController.from_config(config, make_transport)
    print(f"✓ Connected to {config['connection']['host']}")
    print()

    # ================================================================
    # STEP 2: Capability check
    # ================================================================
    print("[2/5] Checking required API methods...")

    required = config["required_methods"]
    if not await rpc.supports(required):
        print("✗ Device is missing required methods, aborting")
        return
    print(f"✓ All {len(required)} required methods available")
    print()

    # ================================================================
    # STEP 3: Stop PLC and write variables
    # ================================================================
    print("[3/5] Stopping PLC and writing variables...")

    print(f"  • Mode before: {await rpc.plc.get_operating_mode()}")
    await rpc.plc.change_operating_mode(OperatingMode.STOP)
    print(f"  • Mode after:  {await rpc.plc.get_operating_mode()}")

    writes = {
        '"Data".Integer': 99,
        '"Data".Real': 21.5,
        '"Data".Motor.Running': True,
        '"Config".Version': "V2.0",
    }
    for name, value in writes.items():
        ok = await rpc.variables.write(name, value)
        print(f"  • write {name} = {value!r}: {'OK' if ok else 'FAILED'}")
    print()

    # ================================================================
    # STEP 4: Read back and browse
    # ================================================================
    print("[4/5] Reading back and browsing...")

    value = await rpc.variables.read('"Data".Integer', int)
    raw = await rpc.variables.read('"Data".Integer', list, mode=ReadWriteMode.RAW)
    print(f"  • \"Data\".Integer = {value} (raw {raw})")

    root = await rpc.variables.browse(BrowseMode.CHILDREN)
    for block in root:
        children = await rpc.variables.browse(BrowseMode.CHILDREN, block.name)
        print(f"  • {block.name} (DB{block.db_number}): {', '.join(children.names)}")
    print()

    # ================================================================
    # STEP 5: Back to Run
    # ================================================================
    print("[5/5] Returning PLC to Run...")

    await rpc.plc.change_operating_mode(OperatingMode.RUN)
    print(f"✓ Mode: {await rpc.plc.get_operating_mode()}")


if __name__ == "__main__":
    asyncio.run(main())
