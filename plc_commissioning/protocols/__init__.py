"""
PLC remote-management protocols.

Structure:
    plc_commissioning/protocols/
    └── webserver/
        ├── rpc_session.py          # RPCSession (lifecycle, capability catalog)
        ├── controller_service.py   # ControllerService (operating mode)
        ├── variable_service.py     # VariableService (read/write/browse)
        ├── rpc_controller.py       # RPCController facade
        ├── request_transport.py    # transport contract, TransportConfig
        └── webserver_simulator.py  # in-memory PLC webserver adapter
"""
