#!/usr/bin/env python3
"""
SMPP Client Example

This example demonstrates how to use the blocking SMPP client to bind to an
SMSC, send a message with a delivery receipt request, wait for the receipt
and look the message up with query_sm.
"""

import logging
import os
import sys

# Add src directory to path for imports
sys.path.insert(
    0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
)

from smppclient import (
    DeliveryReceipt,
    SMPPClient,
    SMPPException,
    Sms,
    create_client_config,
)

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)-8s] [%(name)s] %(message)s',
    datefmt='%H:%M:%S',
)
logger = logging.getLogger(__name__)


def send_example(host: str, port: int, system_id: str, password: str) -> None:
    """Send one long message and wait for its delivery receipt."""
    config = create_client_config(
        host=host,
        port=port,
        system_id=system_id,
        password=password,
        system_type='CLIENT',
        receive_timeout=30000,
    )

    with SMPPClient(config) as client:
        client.bind_transceiver()
        logger.info('Bound as transceiver')

        client.set_sender('INFO').set_recipient('4512345678').request_dlr()
        message_id = client.send_sms(
            'This message is longer than a single SMS, so it is split into '
            'concatenated parts that the handset joins back together. '
            'Only the id of the first part is returned.'
        )
        logger.info(f'Message submitted, id {message_id}')

        while True:
            message = client.read_sms()
            if message is None:
                logger.info('No more messages, giving up')
                break
            if isinstance(message, DeliveryReceipt):
                logger.info(
                    f'Receipt for {message.message_id}: {message.status} '
                    f'(err {message.error_code}, done {message.final_date})'
                )
                if message.message_id == message_id:
                    break
            elif isinstance(message, Sms):
                logger.info(f'Message from {message.source.value}: {message.message}')

        result = client.query_status(message_id, client.sender)
        if result is not None:
            logger.info(f'query_sm: state {result.message_state}')


if __name__ == '__main__':
    try:
        send_example('localhost', 2775, 'demo_client', 'demo_pas')
    except SMPPException as e:
        logger.error(f'SMPP error: {e}')
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info('Client interrupted by user')
