# S3 compatible object store backend (AWS S3, Cloudflare R2, MinIO)
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from folio.storage.base import BlobNotFoundError, ContentStore, StorageError

logger = logging.getLogger(__name__)

MISSING_KEY_CODES = {'NoSuchKey', '404', 'NotFound'}


def make_s3_client(access_key_id, secret_access_key, endpoint_url=None, region='auto'):
    return boto3.client(
        's3',
        endpoint_url=endpoint_url or None,
        region_name=region,
        aws_access_key_id=access_key_id,
        aws_secret_access_key=secret_access_key,
    )


def _is_missing(error):
    code = str(error.response.get('Error', {}).get('Code', ''))
    return code in MISSING_KEY_CODES


class S3Store(ContentStore):
    """Stores blobs as objects in a single bucket."""

    name = 's3'

    def __init__(self, bucket, client, public_base=None):
        self.bucket = bucket
        self.client = client
        self.public_base = public_base.rstrip('/') if public_base else None

    def list(self, prefix='posts/', suffix=None):
        keys = []
        try:
            paginator = self.client.get_paginator('list_objects_v2')
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                keys.extend(obj['Key'] for obj in page.get('Contents', []))
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f'Could not list {prefix!r}: {e}') from e
        return self._filter(keys, prefix, suffix)

    def read(self, key):
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            return response['Body'].read().decode('utf-8')
        except UnicodeDecodeError as e:
            raise StorageError(f'{key} is not valid UTF-8: {e}') from e
        except ClientError as e:
            if _is_missing(e):
                raise BlobNotFoundError(key)
            raise StorageError(f'Could not read {key}: {e}') from e
        except BotoCoreError as e:
            raise StorageError(f'Could not read {key}: {e}') from e

    def write(self, key, text):
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=text.encode('utf-8'),
                ContentType='text/markdown; charset=utf-8',
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f'Could not write {key}: {e}') from e

    def exists(self, key):
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _is_missing(e):
                return False
            raise StorageError(f'Could not stat {key}: {e}') from e
        except BotoCoreError as e:
            raise StorageError(f'Could not stat {key}: {e}') from e
        return True

    def delete(self, key):
        # delete_object succeeds for absent keys, so check first
        if not self.exists(key):
            raise BlobNotFoundError(key)
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f'Could not delete {key}: {e}') from e

    def put_asset(self, key, data, content_type):
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.exception('S3 asset upload failed')
            raise StorageError(f'Could not store asset {key}: {e}') from e
        return self.object_url(key)

    def object_url(self, key):
        if self.public_base:
            return f'{self.public_base}/{key.lstrip("/")}'
        return f'https://{self.bucket}.s3.amazonaws.com/{key.lstrip("/")}'
